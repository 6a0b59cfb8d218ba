#This file is for development purposes only

import logging

from bug_board_client_impl import BoardController, get_client


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print("Hello from bug-board!")
    client = get_client(interactive=True)
    board = BoardController(client)

    print("\nFetching bugs...")
    board.load()
    if board.state.error:
        print(f"Error connecting to the bug service: {board.state.error}")
        board.close()
        return

    for column in board.columns():
        print(f"\n{column.title} ({column.count})")
        for card in column.cards:
            print(f"  - [{card.priority}/{card.severity}] {card.title}  {card.updated}")

    board.close()

if __name__ == "__main__":
    main()
