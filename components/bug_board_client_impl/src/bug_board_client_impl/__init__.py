"""HTTP-backed bug board client: service client, store, gateway, drag coordination and controller."""

from bug_board_client_impl.controller import BoardController, ColumnView, MobileStatusSelector
from bug_board_client_impl.drag import DragCoordinator, DropOutcome, DropResult, KeyboardSensor, PointerSensor, Rect, TouchSensor
from bug_board_client_impl.gateway import MutationGateway
from bug_board_client_impl.http_client import HttpBugServiceClient, get_client
from bug_board_client_impl.notifier import LoggingNotifier
from bug_board_client_impl.store import BoardState, BugStore, reduce

__all__ = [
    "BoardController",
    "BoardState",
    "BugStore",
    "ColumnView",
    "DragCoordinator",
    "DropOutcome",
    "DropResult",
    "HttpBugServiceClient",
    "KeyboardSensor",
    "LoggingNotifier",
    "MobileStatusSelector",
    "MutationGateway",
    "PointerSensor",
    "Rect",
    "TouchSensor",
    "get_client",
    "reduce",
]
