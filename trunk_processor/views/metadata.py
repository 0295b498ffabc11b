"""Structured call metadata parsed from a trunk-recorder JSON document.

trunk-recorder writes one JSON document per call. The models here turn it
into canonical values:

* ``0``/``1`` integer flags become booleans (any other value is rejected);
* fractional-second offsets become integer nanosecond durations
  (``int(seconds * 10**9)``, truncated toward zero);
* whole epoch seconds become timezone-aware UTC datetimes.

Frequency and source observations carry a content hash used as their primary
key. The hash is first computed over the observation's own fields; once the
call's storage key is known, :meth:`CallMetadata.assign_storage_key` attaches
it as the owner and the hash is recomputed with it.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, ClassVar, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
)

from trunk_processor.models.call import AudioType
from trunk_processor.utils.hashing import content_hash

NANOS_PER_SECOND = 1_000_000_000


def int_to_bool(value: Any) -> bool:
    """Map a 0/1 integer flag onto a boolean."""

    if isinstance(value, int) and not isinstance(value, bool) and value in (0, 1):
        return bool(value)
    raise ValueError(f"expected integer flag 0 or 1, got {value!r}")


def seconds_to_nanos(value: Any) -> int:
    """Convert fractional seconds to whole nanoseconds, truncating."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number of seconds, got {value!r}")
    return int(value * NANOS_PER_SECOND)


def epoch_to_datetime(value: Any) -> datetime:
    """Convert epoch seconds to an aware UTC datetime."""

    if isinstance(value, datetime):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected epoch seconds, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"epoch {value!r} is not a whole number of seconds")
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise ValueError(f"epoch {value!r} is not a representable timestamp") from exc


def empty_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def nanos_to_timedelta(nanos: int) -> timedelta:
    """Durations are stored with microsecond resolution."""

    return timedelta(microseconds=nanos // 1000)


IntFlag = Annotated[bool, BeforeValidator(int_to_bool)]
Nanoseconds = Annotated[int, BeforeValidator(seconds_to_nanos)]
EpochTimestamp = Annotated[datetime, BeforeValidator(epoch_to_datetime)]
OptionalText = Annotated[Optional[str], BeforeValidator(empty_to_none)]
SmallInt = Annotated[int, Field(ge=-32_768, le=32_767)]
Int32 = Annotated[int, Field(ge=-2_147_483_648, le=2_147_483_647)]


class HashedEntry(BaseModel):
    """Repeated observation whose primary key is a content hash.

    Subclasses list the fields that feed the hash in ``hash_fields``; the
    owning call key is always hashed first. See ``trunk_processor.utils.hashing``
    for the serialization.
    """

    model_config = ConfigDict(extra="ignore")

    hash_fields: ClassVar[tuple[str, ...]] = ()

    _call_id: str = PrivateAttr(default="")
    _hashed: int = PrivateAttr(default=0)

    def model_post_init(self, __context: Any) -> None:
        self.compute_key()

    @property
    def call_id(self) -> str:
        return self._call_id

    @property
    def hashed(self) -> int:
        return self._hashed

    def hash_values(self) -> list[Any]:
        return [self._call_id, *(getattr(self, name) for name in self.hash_fields)]

    def attach_owner(self, call_id: str) -> None:
        """Attach the owning call key; call :meth:`compute_key` afterwards."""

        self._call_id = call_id

    def compute_key(self) -> int:
        """Recompute and store the content hash."""

        self._hashed = content_hash(self.hash_values())
        return self._hashed

    @abstractmethod
    def to_row(self) -> dict[str, Any]:
        """Column values for the observation's table row."""


class FreqEntry(HashedEntry):
    """One frequency-hop observation within a call."""

    hash_fields: ClassVar[tuple[str, ...]] = (
        "freq",
        "time",
        "pos",
        "len",
        "error_count",
        "spike_count",
    )

    freq: Int32
    time: EpochTimestamp
    pos: Nanoseconds
    len: Nanoseconds
    error_count: SmallInt
    spike_count: SmallInt

    def to_row(self) -> dict[str, Any]:
        return {
            "hashed": self.hashed,
            "call_id": self.call_id,
            "freq": self.freq,
            "time": self.time,
            "pos": nanos_to_timedelta(self.pos),
            "len": nanos_to_timedelta(self.len),
            "error_count": self.error_count,
            "spike_count": self.spike_count,
        }


class SrcEntry(HashedEntry):
    """One radio-transmission observation within a call.

    ``tag`` belongs to the radio unit, not the observation, so it is neither
    hashed nor stored on the srclist row.
    """

    hash_fields: ClassVar[tuple[str, ...]] = (
        "src",
        "time",
        "pos",
        "emergency",
        "signal_system",
    )

    src: Int32
    time: EpochTimestamp
    pos: Nanoseconds
    emergency: IntFlag
    signal_system: OptionalText = None
    tag: OptionalText = None

    def to_row(self) -> dict[str, Any]:
        return {
            "hashed": self.hashed,
            "call_id": self.call_id,
            "src": self.src,
            "time": self.time,
            "pos": nanos_to_timedelta(self.pos),
            "emergency": self.emergency,
            "signal_system": self.signal_system,
        }


class CallMetadata(BaseModel):
    """Normalized call document plus the fields assigned during ingestion."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    freq: Int32
    freq_error: SmallInt
    signal: SmallInt
    noise: SmallInt
    source_num: SmallInt
    recorder_num: SmallInt
    tdma_slot: SmallInt
    phase2_tdma: SmallInt
    start_time: EpochTimestamp
    stop_time: EpochTimestamp
    emergency: IntFlag
    priority: SmallInt
    mode: SmallInt
    duplex: SmallInt
    encrypted: IntFlag
    call_length: SmallInt
    talkgroup: Int32
    talkgroup_tag: str
    talkgroup_description: str
    talkgroup_group_tag: str
    talkgroup_group: str
    audio_type: AudioType
    short_name: str
    freq_list: list[FreqEntry] = Field(
        validation_alias=AliasChoices("freqList", "freq_list"),
    )
    src_list: list[SrcEntry] = Field(
        validation_alias=AliasChoices("srcList", "src_list"),
    )

    _filename: str = PrivateAttr(default="")
    _transcription: Optional[str] = PrivateAttr(default=None)

    @field_validator("audio_type", mode="before")
    @classmethod
    def _normalise_audio_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower().replace(" ", "_").replace("-", "_")
        return value

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def transcription(self) -> Optional[str]:
        return self._transcription

    def entries(self) -> list[HashedEntry]:
        return [*self.freq_list, *self.src_list]

    def assign_storage_key(self, filename: str) -> None:
        """Set the call's primary key and rehash every child entry with it."""

        self._filename = filename
        for entry in self.entries():
            entry.attach_owner(filename)
            entry.compute_key()

    def set_transcription(self, text: Optional[str]) -> None:
        self._transcription = text

    def radio_ids(self) -> list[int]:
        return [entry.src for entry in self.src_list]

    def sources(self) -> dict[int, Optional[str]]:
        """Distinct radio units referenced by the call; the last tag seen wins."""

        units: dict[int, Optional[str]] = {}
        for entry in self.src_list:
            units[entry.src] = entry.tag
        return units

    def talkgroup_row(self) -> dict[str, Any]:
        return {
            "talkgroup": self.talkgroup,
            "talkgroup_tag": self.talkgroup_tag,
            "talkgroup_description": self.talkgroup_description,
            "talkgroup_group_tag": self.talkgroup_group_tag,
            "talkgroup_group": self.talkgroup_group,
        }

    def source_rows(self) -> list[dict[str, Any]]:
        return [{"src": src, "tag": tag} for src, tag in self.sources().items()]

    def call_row(self) -> dict[str, Any]:
        if not self._filename:
            raise ValueError("storage key has not been assigned")
        return {
            "filename": self._filename,
            "freq": self.freq,
            "freq_error": self.freq_error,
            "signal": self.signal,
            "noise": self.noise,
            "source_num": self.source_num,
            "recorder_num": self.recorder_num,
            "tdma_slot": self.tdma_slot,
            "phase2_tdma": self.phase2_tdma,
            "start_time": self.start_time,
            "stop_time": self.stop_time,
            "emergency": self.emergency,
            "priority": self.priority,
            "mode": self.mode,
            "duplex": self.duplex,
            "encrypted": self.encrypted,
            "call_length": self.call_length,
            "talkgroup": self.talkgroup,
            "audio_type": self.audio_type,
            "short_name": self.short_name,
            "transcription": self._transcription,
        }


__all__ = [
    "CallMetadata",
    "FreqEntry",
    "HashedEntry",
    "SrcEntry",
    "epoch_to_datetime",
    "int_to_bool",
    "nanos_to_timedelta",
    "seconds_to_nanos",
]
