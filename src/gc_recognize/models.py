"""Typed records produced by the recognition pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from gc_recognize.decorator import Decorator
from gc_recognize.units import bytes_to_kb, parallelism

DetailValue: TypeAlias = int | str | bool


def read_only(value: Mapping[Any, Any]) -> Mapping[Any, Any]:
    """Snapshot a mapping behind a read-only view."""
    return MappingProxyType(dict(value))


# ============================================================
# ENUMERATIONS
# ============================================================


class EventKind(str, Enum):
    """Closed set of log record kinds."""

    # G1 (legacy logging)
    G1_YOUNG_PAUSE = "G1_YOUNG_PAUSE"
    G1_MIXED_PAUSE = "G1_MIXED_PAUSE"
    G1_YOUNG_INITIAL_MARK = "G1_YOUNG_INITIAL_MARK"
    G1_REMARK = "G1_REMARK"
    G1_CLEANUP = "G1_CLEANUP"
    G1_FULL_GC_SERIAL = "G1_FULL_GC_SERIAL"
    G1_CONCURRENT = "G1_CONCURRENT"

    # CMS
    PAR_NEW = "PAR_NEW"
    CMS_SERIAL_OLD = "CMS_SERIAL_OLD"
    CMS_INITIAL_MARK = "CMS_INITIAL_MARK"
    CMS_REMARK = "CMS_REMARK"
    CMS_CONCURRENT = "CMS_CONCURRENT"

    # Serial
    SERIAL_NEW = "SERIAL_NEW"
    SERIAL_OLD = "SERIAL_OLD"

    # Parallel
    PARALLEL_SCAVENGE = "PARALLEL_SCAVENGE"
    PARALLEL_SERIAL_OLD = "PARALLEL_SERIAL_OLD"
    PARALLEL_COMPACTING_OLD = "PARALLEL_COMPACTING_OLD"

    # Collector-agnostic legacy records
    VERBOSE_GC_YOUNG = "VERBOSE_GC_YOUNG"
    VERBOSE_GC_OLD = "VERBOSE_GC_OLD"
    APPLICATION_CONCURRENT_TIME = "APPLICATION_CONCURRENT_TIME"
    APPLICATION_STOPPED_TIME = "APPLICATION_STOPPED_TIME"
    GC_LOCKER = "GC_LOCKER"
    GC_OVERHEAD_LIMIT = "GC_OVERHEAD_LIMIT"

    # Headers and informational blocks
    HEADER_COMMAND_LINE_FLAGS = "HEADER_COMMAND_LINE_FLAGS"
    HEADER_MEMORY = "HEADER_MEMORY"
    HEADER_VERSION = "HEADER_VERSION"
    HEAP_AT_GC = "HEAP_AT_GC"
    TENURING_DISTRIBUTION = "TENURING_DISTRIBUTION"
    FLS_STATISTIC = "FLS_STATISTIC"
    ADAPTIVE_SIZE_POLICY = "ADAPTIVE_SIZE_POLICY"
    CLASS_UNLOADING = "CLASS_UNLOADING"

    # Shenandoah
    SHENANDOAH_CONCURRENT = "SHENANDOAH_CONCURRENT"
    SHENANDOAH_STATS = "SHENANDOAH_STATS"
    SHENANDOAH_INIT_MARK = "SHENANDOAH_INIT_MARK"
    SHENANDOAH_FINAL_MARK = "SHENANDOAH_FINAL_MARK"
    SHENANDOAH_FINAL_EVAC = "SHENANDOAH_FINAL_EVAC"
    SHENANDOAH_INIT_UPDATE = "SHENANDOAH_INIT_UPDATE"
    SHENANDOAH_FINAL_UPDATE = "SHENANDOAH_FINAL_UPDATE"
    SHENANDOAH_DEGENERATED_GC = "SHENANDOAH_DEGENERATED_GC"
    SHENANDOAH_FULL_GC = "SHENANDOAH_FULL_GC"
    SHENANDOAH_TRIGGER = "SHENANDOAH_TRIGGER"
    SHENANDOAH_CANCELLING_GC = "SHENANDOAH_CANCELLING_GC"

    # ZGC
    Z_MARK_START = "Z_MARK_START"
    Z_MARK_END = "Z_MARK_END"
    Z_RELOCATE_START = "Z_RELOCATE_START"
    Z_GARBAGE_COLLECTION = "Z_GARBAGE_COLLECTION"

    # Unified logging pauses
    UNIFIED_SERIAL_NEW = "UNIFIED_SERIAL_NEW"
    UNIFIED_SERIAL_OLD = "UNIFIED_SERIAL_OLD"
    UNIFIED_PAR_NEW = "UNIFIED_PAR_NEW"
    UNIFIED_CMS_INITIAL_MARK = "UNIFIED_CMS_INITIAL_MARK"
    UNIFIED_PARALLEL_SCAVENGE = "UNIFIED_PARALLEL_SCAVENGE"
    UNIFIED_PARALLEL_COMPACTING_OLD = "UNIFIED_PARALLEL_COMPACTING_OLD"
    UNIFIED_G1_YOUNG_PAUSE = "UNIFIED_G1_YOUNG_PAUSE"
    UNIFIED_G1_MIXED_PAUSE = "UNIFIED_G1_MIXED_PAUSE"
    UNIFIED_G1_YOUNG_INITIAL_MARK = "UNIFIED_G1_YOUNG_INITIAL_MARK"
    UNIFIED_G1_CLEANUP = "UNIFIED_G1_CLEANUP"
    UNIFIED_G1_FULL_GC = "UNIFIED_G1_FULL_GC"
    UNIFIED_REMARK = "UNIFIED_REMARK"
    UNIFIED_YOUNG = "UNIFIED_YOUNG"
    UNIFIED_OLD = "UNIFIED_OLD"
    UNIFIED_CONCURRENT = "UNIFIED_CONCURRENT"

    # Unified logging informational records
    UNIFIED_SAFEPOINT = "UNIFIED_SAFEPOINT"
    USING_SERIAL = "USING_SERIAL"
    USING_PARALLEL = "USING_PARALLEL"
    USING_CMS = "USING_CMS"
    USING_G1 = "USING_G1"
    USING_SHENANDOAH = "USING_SHENANDOAH"
    USING_Z = "USING_Z"
    UNIFIED_GC_DETAIL = "UNIFIED_GC_DETAIL"
    GC_INFO = "GC_INFO"
    UNIFIED_BLANK_LINE = "UNIFIED_BLANK_LINE"

    UNKNOWN = "UNKNOWN"


class Trigger(str, Enum):
    """Reported cause of a collection or safepoint; values are the log text."""

    ALLOCATION_FAILURE = "Allocation Failure"
    METADATA_GC_THRESHOLD = "Metadata GC Threshold"
    SYSTEM_GC = "System.gc()"
    ERGONOMICS = "Ergonomics"
    GCLOCKER_INITIATED_GC = "GCLocker Initiated GC"
    G1_EVACUATION_PAUSE = "G1 Evacuation Pause"
    G1_HUMONGOUS_ALLOCATION = "G1 Humongous Allocation"
    G1_PREVENTIVE_COLLECTION = "G1 Preventive Collection"
    G1_COMPACTION_PAUSE = "G1 Compaction Pause"
    TO_SPACE_EXHAUSTED = "to-space exhausted"
    TO_SPACE_OVERFLOW = "to-space overflow"
    EVACUATION_FAILURE = "Evacuation Failure"
    PROMOTION_FAILED = "promotion failed"
    CONCURRENT_MODE_FAILURE = "concurrent mode failure"
    CONCURRENT_MODE_INTERRUPTED = "concurrent mode interrupted"
    CMS_INITIAL_MARK = "CMS Initial Mark"
    CMS_FINAL_REMARK = "CMS Final Remark"
    LAST_DITCH_COLLECTION = "Last ditch collection"
    HEAP_INSPECTION_INITIATED_GC = "Heap Inspection Initiated GC"
    HEAP_DUMP_INITIATED_GC = "Heap Dump Initiated GC"
    JVMTI_FORCE_GC = "JvmtiEnv ForceGarbageCollection"
    DIAGNOSTIC_COMMAND = "Diagnostic Command"
    UPDATE_ALLOCATION_CONTEXT_STATS = "Update Allocation Context Stats"
    ALLOCATION_RATE = "Allocation Rate"
    ALLOCATION_STALL = "Allocation Stall"
    PROACTIVE = "Proactive"
    WARMUP = "Warmup"
    TIMER = "Timer"
    HIGH_USAGE = "High Usage"

    # Safepoint operations
    CLEAN_CLASSLOADER_DATA_METASPACES = "CleanClassLoaderDataMetaspaces"
    COLLECT_FOR_METADATA_ALLOCATION = "CollectForMetadataAllocation"
    G1_COLLECT_FOR_ALLOCATION = "G1CollectForAllocation"
    G1_COLLECT_FULL = "G1CollectFull"
    G1_CONCURRENT = "G1Concurrent"
    G1_PAUSE_REMARK = "G1PauseRemark"
    G1_PAUSE_CLEANUP = "G1PauseCleanup"
    GEN_COLLECT_FOR_ALLOCATION = "GenCollectForAllocation"
    GEN_COLLECT_FULL_CONCURRENT = "GenCollectFullConcurrent"
    PARALLEL_GC_FAILED_ALLOCATION = "ParallelGCFailedAllocation"
    PARALLEL_GC_SYSTEM_GC = "ParallelGCSystemGC"
    CMS_INITIAL_MARK_OPERATION = "CMS_Initial_Mark"
    CMS_FINAL_REMARK_OPERATION = "CMS_Final_Remark"
    SHENANDOAH_INIT_MARK = "ShenandoahInitMark"
    SHENANDOAH_FINAL_MARK_START_EVAC = "ShenandoahFinalMarkStartEvac"
    SHENANDOAH_INIT_UPDATE_REFS = "ShenandoahInitUpdateRefs"
    SHENANDOAH_FINAL_UPDATE_REFS = "ShenandoahFinalUpdateRefs"
    SHENANDOAH_DEGENERATED_GC = "ShenandoahDegeneratedGC"
    Z_MARK_START = "ZMarkStart"
    Z_MARK_END = "ZMarkEnd"
    Z_RELOCATE_START = "ZRelocateStart"
    BULK_REVOKE_BIAS = "BulkRevokeBias"
    REVOKE_BIAS = "RevokeBias"
    ENABLE_BIASED_LOCKING = "EnableBiasedLocking"
    DEOPTIMIZE = "Deoptimize"
    HANDSHAKE_FALLBACK = "HandshakeFallback"
    CLEANUP = "Cleanup"
    FIND_DEADLOCKS = "FindDeadlocks"
    THREAD_DUMP = "ThreadDump"
    PRINT_THREADS = "PrintThreads"
    GET_ALL_STACK_TRACES = "GetAllStackTraces"
    ICBUFFER_FULL = "ICBufferFull"
    EXIT = "Exit"
    NO_VM_OPERATION = "no vm operation"

    @classmethod
    def from_text(cls, text: str | None) -> Trigger | None:
        """Look up a trigger by its log text; unknown text yields None."""
        if not text:
            return None
        return _TRIGGERS_BY_TEXT.get(text.strip())


_TRIGGERS_BY_TEXT: dict[str, Trigger] = {trigger.value: trigger for trigger in Trigger}


class Region(str, Enum):
    """Memory regions an event can report occupancy for."""

    YOUNG = "young"
    OLD = "old"
    COMBINED = "combined"
    METASPACE = "metaspace"
    EDEN = "eden"


# ============================================================
# PYDANTIC MODELS
# ============================================================


class MemoryUsage(BaseModel):
    """Occupancy of one region before and after an event, plus its capacity."""

    model_config = ConfigDict(frozen=True)

    region: Region
    before_bytes: int
    after_bytes: int
    capacity_bytes: int

    @property
    def before_kb(self) -> int:
        return bytes_to_kb(self.before_bytes)

    @property
    def after_kb(self) -> int:
        return bytes_to_kb(self.after_bytes)

    @property
    def capacity_kb(self) -> int:
        return bytes_to_kb(self.capacity_bytes)

    @property
    def peak_bytes(self) -> int:
        return max(self.before_bytes, self.after_bytes)


class CpuTimes(BaseModel):
    """CPU time trailer of a pause, in centiseconds."""

    model_config = ConfigDict(frozen=True)

    user_centis: int = Field(ge=0)
    sys_centis: int = Field(ge=0)
    real_centis: int = Field(ge=0)

    @property
    def parallelism(self) -> int | None:
        return parallelism(self.user_centis, self.sys_centis, self.real_centis)


class GcEvent(BaseModel):
    """One recognized log record.

    Fields that do not apply to a kind are left unset; use ``has_region`` or
    ``region`` rather than assuming a region is present. Occupancy may exceed
    capacity when the JVM logs transient values, and timestamps are not
    guaranteed to increase from one event to the next.
    """

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    timestamp_ms: int | None = None
    duration_us: int | None = Field(default=None, ge=0)
    trigger: Trigger | None = None
    regions: tuple[MemoryUsage, ...] = ()
    cpu: CpuTimes | None = None
    sequence_number: int | None = None
    details: Mapping[str, DetailValue] = Field(default_factory=dict, validate_default=True)
    log_entry: str = ""

    @field_validator("details", mode="after")
    @classmethod
    def _freeze_details(cls, value: Mapping[str, DetailValue]) -> Mapping[str, DetailValue]:
        return read_only(value)

    @field_serializer("details")
    def _dump_details(self, value: Mapping[str, DetailValue]) -> dict[str, DetailValue]:
        return dict(value)

    def region(self, region: Region) -> MemoryUsage | None:
        """Usage for a region; COMBINED falls back to young + old."""
        for usage in self.regions:
            if usage.region is region:
                return usage
        if region is Region.COMBINED:
            return self._derived_combined()
        return None

    def has_region(self, region: Region) -> bool:
        return self.region(region) is not None

    def _derived_combined(self) -> MemoryUsage | None:
        young = next((u for u in self.regions if u.region is Region.YOUNG), None)
        old = next((u for u in self.regions if u.region is Region.OLD), None)
        if young is None or old is None:
            return None
        return MemoryUsage(
            region=Region.COMBINED,
            before_bytes=young.before_bytes + old.before_bytes,
            after_bytes=young.after_bytes + old.after_bytes,
            capacity_bytes=young.capacity_bytes + old.capacity_bytes,
        )

    @property
    def parallelism(self) -> int | None:
        if self.cpu is None:
            return None
        return self.cpu.parallelism


class PreprocessedLine(BaseModel):
    """A logical record rebuilt from one or more physical lines.

    ``text`` keeps the first fragment's decorator so the line can be
    classified exactly like a raw one. ``start_stamped`` is set when that
    decorator belongs to the line logged as a unified pause began.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    decorator: Decorator | None = None
    line_number: int = Field(ge=1)
    fragment_count: int = Field(default=1, ge=1)
    start_stamped: bool = False


class RunSummary(BaseModel):
    """Aggregates over a whole run, frozen once the input is exhausted."""

    model_config = ConfigDict(frozen=True)

    event_count: int = 0
    min_timestamp_ms: int | None = None
    max_timestamp_ms: int | None = None
    kind_counts: Mapping[EventKind, int] = Field(default_factory=dict, validate_default=True)

    blocking_event_count: int = 0
    total_pause_us: int = 0
    max_pause_us: int = 0

    total_user_centis: int = 0
    total_sys_centis: int = 0
    total_real_centis: int = 0

    max_occupancy_bytes: Mapping[Region, int] = Field(default_factory=dict, validate_default=True)
    max_capacity_bytes: Mapping[Region, int] = Field(default_factory=dict, validate_default=True)

    unknown_line_count: int = 0
    unknown_samples: tuple[str, ...] = ()
    discarded_fragment_count: int = 0
    dropped_statistics_lines: int = 0

    @field_validator("kind_counts", "max_occupancy_bytes", "max_capacity_bytes", mode="after")
    @classmethod
    def _freeze_counts(cls, value: Mapping[Any, int]) -> Mapping[Any, int]:
        return read_only(value)

    @field_serializer("kind_counts", "max_occupancy_bytes", "max_capacity_bytes")
    def _dump_counts(self, value: Mapping[Any, int]) -> dict[Any, int]:
        return dict(value)

    @property
    def run_duration_ms(self) -> int:
        if self.min_timestamp_ms is None or self.max_timestamp_ms is None:
            return 0
        return self.max_timestamp_ms - self.min_timestamp_ms

    @property
    def pause_percentage(self) -> float:
        """Share of the run spent in blocking pauses."""
        if self.run_duration_ms <= 0:
            return 0.0
        return min(100.0, self.total_pause_us / 10 / self.run_duration_ms)
