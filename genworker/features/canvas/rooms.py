"""
Canvas Rooms
캔버스별 인메모리 레코드 저장소와 원자적 업데이트

워커는 룸을 좁은 트랜잭션 인터페이스(update_store)로만 사용합니다.
mutator 가 정상 반환해야 스테이징된 변경이 한 번에 커밋되고, 커밋 후 스냅샷이 저장됩니다.
"""

import asyncio
import copy
import inspect
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
SnapshotKey = Union[uuid.UUID, str]

_DELETED = object()


class SnapshotStore(Protocol):
    """스냅샷 영속화 (CanvasRepository 가 구현)"""

    async def get_snapshot(self, canvas_id: SnapshotKey) -> Optional[Dict[str, Any]]: ...

    async def save_snapshot(self, canvas_id: SnapshotKey, snapshot: Dict[str, Any]) -> None: ...


class RoomStore:
    """
    update_store 중 mutator 에 전달되는 트랜잭션 뷰

    get 은 스테이징된 값을 우선하고, put/delete 는 커밋 전까지 룸에 반영되지 않습니다.
    """

    def __init__(self, records: Dict[str, Record]):
        self._records = records
        self._staged: Dict[str, Any] = {}

    def get(self, record_id: str) -> Optional[Record]:
        if record_id in self._staged:
            staged = self._staged[record_id]
            return None if staged is _DELETED else copy.deepcopy(staged)
        record = self._records.get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def put(self, record: Record) -> None:
        if "id" not in record:
            raise ValueError("Record must have an id")
        self._staged[record["id"]] = copy.deepcopy(record)

    def delete(self, record_id: str) -> None:
        self._staged[record_id] = _DELETED

    @property
    def changes(self) -> Dict[str, Any]:
        return self._staged


class CanvasRoom:
    """단일 캔버스 룸"""

    def __init__(
        self,
        canvas_id: SnapshotKey,
        snapshot: Optional[Dict[str, Any]],
        persist: Callable[["CanvasRoom"], Awaitable[None]],
    ):
        self.canvas_id = canvas_id
        self._persist = persist
        self._lock = asyncio.Lock()
        self._closed = False
        self.needs_persist = False

        snapshot = snapshot or {}
        self._extras = {k: v for k, v in snapshot.items() if k not in ("documents", "clock")}
        self.clock: int = int(snapshot.get("clock") or 0)
        self._records: Dict[str, Record] = {}
        self._changed_at: Dict[str, int] = {}
        for document in snapshot.get("documents") or []:
            state = document.get("state") or {}
            if "id" in state:
                self._records[state["id"]] = state
                self._changed_at[state["id"]] = int(document.get("lastChangedClock") or 0)

    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def get(self, record_id: str) -> Optional[Record]:
        record = self._records.get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def get_snapshot(self) -> Dict[str, Any]:
        """현재 레코드로 스냅샷 생성"""
        return {
            **copy.deepcopy(self._extras),
            "clock": self.clock,
            "documents": [
                {"state": copy.deepcopy(record), "lastChangedClock": self._changed_at.get(record_id, 0)}
                for record_id, record in self._records.items()
            ],
        }

    async def update_store(self, mutator: Callable[[RoomStore], Any]) -> None:
        """
        mutator 를 원자적으로 실행

        mutator 가 예외를 던지면 어떤 변경도 반영되지 않습니다.

        Raises:
            RuntimeError: 닫힌 룸
        """
        async with self._lock:
            if self._closed:
                raise RuntimeError(f"Room {self.canvas_id} is closed")

            store = RoomStore(self._records)
            result = mutator(store)
            if inspect.isawaitable(result):
                await result

            if not store.changes:
                return

            self.clock += 1
            for record_id, value in store.changes.items():
                if value is _DELETED:
                    self._records.pop(record_id, None)
                    self._changed_at.pop(record_id, None)
                else:
                    self._records[record_id] = value
                    self._changed_at[record_id] = self.clock
            self.needs_persist = True

        await self._persist(self)


class RoomManager:
    """
    캔버스 룸 관리자

    캔버스당 하나의 룸을 캐시하고, 없으면 저장된 스냅샷에서 로드합니다.
    """

    def __init__(self, snapshot_store: SnapshotStore):
        self.snapshot_store = snapshot_store
        self._rooms: Dict[str, CanvasRoom] = {}
        self._lock = asyncio.Lock()

    async def make_or_load_room(self, canvas_id: SnapshotKey) -> CanvasRoom:
        key = str(canvas_id)
        async with self._lock:
            room = self._rooms.get(key)
            if room is not None and not room.is_closed():
                return room

            logger.info(f"[Canvas] Loading room: {key}")
            snapshot = await self.snapshot_store.get_snapshot(canvas_id)
            room = CanvasRoom(canvas_id, snapshot, self._persist_room)
            self._rooms[key] = room
            return room

    def get_room(self, canvas_id: SnapshotKey) -> Optional[CanvasRoom]:
        return self._rooms.get(str(canvas_id))

    def close_room(self, canvas_id: SnapshotKey) -> None:
        room = self._rooms.pop(str(canvas_id), None)
        if room is not None:
            logger.info(f"[Canvas] Closing room: {canvas_id}")
            room.close()

    async def _persist_room(self, room: CanvasRoom) -> None:
        snapshot = room.get_snapshot()
        room.needs_persist = False
        try:
            await self.snapshot_store.save_snapshot(room.canvas_id, snapshot)
        except Exception:
            room.needs_persist = True
            raise

    async def persist_pending(self) -> int:
        """
        저장되지 않은 룸 스냅샷 저장 및 닫힌 룸 정리

        Returns:
            int: 저장한 룸 수
        """
        saved = 0
        for key, room in list(self._rooms.items()):
            if room.is_closed():
                self._rooms.pop(key, None)
                continue
            if room.needs_persist:
                try:
                    await self._persist_room(room)
                    saved += 1
                except Exception as e:
                    logger.error(f"[Canvas] Failed to save snapshot for {key}: {e}")
        return saved

    def get_room_stats(self) -> Dict[str, Any]:
        rooms: List[Dict[str, Any]] = [
            {
                "canvasId": key,
                "isClosed": room.is_closed(),
                "needsPersist": room.needs_persist,
            }
            for key, room in self._rooms.items()
        ]
        return {"activeRooms": len(self._rooms), "rooms": rooms}
