# services/realtime.py
"""
In-process change feed for bookings and messages.

Services publish an event after every successful write. WebSocket handlers
subscribe per table and fold the events into a LiveList, which mirrors the
server records for one connection.
"""
import asyncio
from collections import defaultdict
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Type
from pydantic import BaseModel
from models.realtime import ChangeEvent
from utils.logger import get_logger

logger = get_logger("Realtime")

class ChangeRelay:
    def __init__(self, max_queue: int = 1000):
        self.max_queue = max_queue
        # queue -> the event loop its consumer runs on
        self._subscribers: Dict[str, Dict[asyncio.Queue, asyncio.AbstractEventLoop]] = defaultdict(dict)

    def subscribe(self, table: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue)
        self._subscribers[table][queue] = asyncio.get_running_loop()
        logger.info(f"Subscriber added for {table} ({len(self._subscribers[table])} active)")
        return queue

    def unsubscribe(self, table: str, queue: asyncio.Queue) -> None:
        self._subscribers[table].pop(queue, None)
        logger.info(f"Subscriber removed for {table} ({len(self._subscribers[table])} active)")

    def subscriber_count(self, table: str) -> int:
        return len(self._subscribers.get(table, ()))

    @staticmethod
    def _deliver(queue: asyncio.Queue, event: ChangeEvent) -> None:
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Subscriber queue full, event dropped", extra={"table": event.table, "record_id": event.record_id})

    def publish(self, table: str, change_type: str, record) -> ChangeEvent:
        """
        Fan an event out to every subscriber of `table`, in publish order.
        Subscribers on another event loop (or when called outside any loop)
        receive it through call_soon_threadsafe.
        """
        if isinstance(record, BaseModel):
            record = record.model_dump(mode="json")
        event = ChangeEvent(table=table, type=change_type, record=record)
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None
        for queue, loop in list(self._subscribers.get(table, {}).items()):
            if loop is current:
                self._deliver(queue, event)
            else:
                loop.call_soon_threadsafe(self._deliver, queue, event)
        return event

class LiveList:
    """
    Records keyed by id, patched by change events.

    INSERT appends, UPDATE replaces, DELETE removes. A write carrying an older
    updated_at than the held copy is ignored, so the newest server state wins
    regardless of arrival order. Records outside `predicate` are dropped.
    """

    def __init__(self, model: Type[BaseModel], records: Iterable[BaseModel] = (), predicate: Optional[Callable[[BaseModel], bool]] = None):
        self.model = model
        self.predicate = predicate
        self._items: Dict[str, BaseModel] = {}
        self.replace_all(records)

    def replace_all(self, records: Iterable[BaseModel]) -> None:
        self._items = {}
        for record in records:
            if self.predicate is None or self.predicate(record):
                self._items[record.id] = record

    @property
    def items(self) -> List[BaseModel]:
        return list(self._items.values())

    def get(self, record_id: str) -> Optional[BaseModel]:
        return self._items.get(record_id)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[BaseModel]:
        return iter(list(self._items.values()))

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._items

    @staticmethod
    def _is_stale(incoming: BaseModel, held: BaseModel) -> bool:
        incoming_ts = getattr(incoming, "updated_at", None)
        held_ts = getattr(held, "updated_at", None)
        return incoming_ts is not None and held_ts is not None and incoming_ts < held_ts

    def apply(self, event: ChangeEvent) -> bool:
        """Fold one event into the list. Returns True when the list changed."""
        if event.type == "DELETE":
            record_id = event.record_id
            if record_id is None:
                raise ValueError("DELETE event without a record id")
            return self._items.pop(str(record_id), None) is not None

        # raises pydantic.ValidationError (a ValueError) on a malformed payload
        record = self.model.model_validate(event.record)
        held = self._items.get(record.id)
        if held is not None and self._is_stale(record, held):
            logger.info(f"Ignoring stale {event.type} for {record.id}")
            return False
        if self.predicate is not None and not self.predicate(record):
            return self._items.pop(record.id, None) is not None
        self._items[record.id] = record
        return True

change_relay = ChangeRelay()
