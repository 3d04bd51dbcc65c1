"""Event recognizers, one per event kind, in classification priority order.

``RECOGNIZERS`` is the dispatch order used by the classifier. Specific and
rare grammars come before general ones so a broad grammar never claims a
line a narrower one describes exactly:

* unified-only records before legacy ones sharing the same text;
* full collections before young collections of the same collector, since a
  failed young collection is logged with the young clause first;
* the catch-all detail recognizer last.
"""

from __future__ import annotations

from gc_recognize.recognizers._base import Recognizer
from gc_recognize.recognizers.cms import (
    CmsConcurrentRecognizer,
    CmsInitialMarkRecognizer,
    CmsRemarkRecognizer,
    CmsSerialOldRecognizer,
    ParNewRecognizer,
)
from gc_recognize.recognizers.g1 import (
    G1CleanupRecognizer,
    G1ConcurrentRecognizer,
    G1FullGcRecognizer,
    G1MixedPauseRecognizer,
    G1RemarkRecognizer,
    G1YoungInitialMarkRecognizer,
    G1YoungPauseRecognizer,
)
from gc_recognize.recognizers.header import (
    AdaptiveSizePolicyRecognizer,
    ClassUnloadingRecognizer,
    FlsStatisticRecognizer,
    HeaderCommandLineFlagsRecognizer,
    HeaderMemoryRecognizer,
    HeaderVersionRecognizer,
    HeapAtGcRecognizer,
    TenuringDistributionRecognizer,
)
from gc_recognize.recognizers.legacy import (
    ApplicationConcurrentTimeRecognizer,
    ApplicationStoppedTimeRecognizer,
    GcLockerRecognizer,
    GcOverheadLimitRecognizer,
    VerboseGcOldRecognizer,
    VerboseGcYoungRecognizer,
)
from gc_recognize.recognizers.parallel import (
    ParallelCompactingOldRecognizer,
    ParallelScavengeRecognizer,
    ParallelSerialOldRecognizer,
)
from gc_recognize.recognizers.serial import SerialNewRecognizer, SerialOldRecognizer
from gc_recognize.recognizers.shenandoah import (
    ShenandoahCancellingGcRecognizer,
    ShenandoahConcurrentRecognizer,
    ShenandoahDegeneratedGcRecognizer,
    ShenandoahFinalEvacRecognizer,
    ShenandoahFinalMarkRecognizer,
    ShenandoahFinalUpdateRecognizer,
    ShenandoahFullGcRecognizer,
    ShenandoahInitMarkRecognizer,
    ShenandoahInitUpdateRecognizer,
    ShenandoahStatsRecognizer,
    ShenandoahTriggerRecognizer,
)
from gc_recognize.recognizers.unified import (
    UnifiedCmsInitialMarkRecognizer,
    UnifiedConcurrentRecognizer,
    UnifiedG1CleanupRecognizer,
    UnifiedG1FullGcRecognizer,
    UnifiedG1MixedPauseRecognizer,
    UnifiedG1YoungInitialMarkRecognizer,
    UnifiedG1YoungPauseRecognizer,
    UnifiedOldRecognizer,
    UnifiedParallelCompactingOldRecognizer,
    UnifiedParallelScavengeRecognizer,
    UnifiedParNewRecognizer,
    UnifiedRemarkRecognizer,
    UnifiedSerialNewRecognizer,
    UnifiedSerialOldRecognizer,
    UnifiedYoungRecognizer,
)
from gc_recognize.recognizers.unified_info import (
    GcInfoRecognizer,
    UnifiedBlankLineRecognizer,
    UnifiedGcDetailRecognizer,
    UnifiedSafepointRecognizer,
    UsingCmsRecognizer,
    UsingG1Recognizer,
    UsingParallelRecognizer,
    UsingSerialRecognizer,
    UsingShenandoahRecognizer,
    UsingZRecognizer,
)
from gc_recognize.recognizers.zgc import (
    ZGarbageCollectionRecognizer,
    ZMarkEndRecognizer,
    ZMarkStartRecognizer,
    ZRelocateStartRecognizer,
)

RECOGNIZERS: tuple[Recognizer, ...] = (
    # Headers
    HeaderCommandLineFlagsRecognizer(),
    HeaderMemoryRecognizer(),
    HeaderVersionRecognizer(),
    # Unified informational records
    UnifiedBlankLineRecognizer(),
    UsingSerialRecognizer(),
    UsingParallelRecognizer(),
    UsingCmsRecognizer(),
    UsingG1Recognizer(),
    UsingShenandoahRecognizer(),
    UsingZRecognizer(),
    UnifiedSafepointRecognizer(),
    # Statistics blocks
    ShenandoahStatsRecognizer(),
    FlsStatisticRecognizer(),
    # Shenandoah
    ShenandoahTriggerRecognizer(),
    ShenandoahCancellingGcRecognizer(),
    ShenandoahInitMarkRecognizer(),
    ShenandoahFinalMarkRecognizer(),
    ShenandoahFinalEvacRecognizer(),
    ShenandoahInitUpdateRecognizer(),
    ShenandoahFinalUpdateRecognizer(),
    ShenandoahDegeneratedGcRecognizer(),
    ShenandoahFullGcRecognizer(),
    ShenandoahConcurrentRecognizer(),
    # ZGC
    ZMarkStartRecognizer(),
    ZMarkEndRecognizer(),
    ZRelocateStartRecognizer(),
    ZGarbageCollectionRecognizer(),
    # Unified pauses, collector-specific before generic summaries
    UnifiedSerialOldRecognizer(),
    UnifiedSerialNewRecognizer(),
    UnifiedParallelCompactingOldRecognizer(),
    UnifiedParallelScavengeRecognizer(),
    UnifiedParNewRecognizer(),
    UnifiedCmsInitialMarkRecognizer(),
    UnifiedG1YoungInitialMarkRecognizer(),
    UnifiedG1MixedPauseRecognizer(),
    UnifiedG1YoungPauseRecognizer(),
    UnifiedG1CleanupRecognizer(),
    UnifiedG1FullGcRecognizer(),
    UnifiedRemarkRecognizer(),
    UnifiedYoungRecognizer(),
    UnifiedOldRecognizer(),
    UnifiedConcurrentRecognizer(),
    # Legacy G1
    G1YoungInitialMarkRecognizer(),
    G1MixedPauseRecognizer(),
    G1YoungPauseRecognizer(),
    G1RemarkRecognizer(),
    G1CleanupRecognizer(),
    G1FullGcRecognizer(),
    G1ConcurrentRecognizer(),
    # CMS
    CmsSerialOldRecognizer(),
    ParNewRecognizer(),
    CmsInitialMarkRecognizer(),
    CmsRemarkRecognizer(),
    CmsConcurrentRecognizer(),
    # Serial
    SerialOldRecognizer(),
    SerialNewRecognizer(),
    # Parallel
    ParallelCompactingOldRecognizer(),
    ParallelSerialOldRecognizer(),
    ParallelScavengeRecognizer(),
    # Collector-agnostic legacy records
    VerboseGcOldRecognizer(),
    VerboseGcYoungRecognizer(),
    ApplicationConcurrentTimeRecognizer(),
    ApplicationStoppedTimeRecognizer(),
    GcLockerRecognizer(),
    GcOverheadLimitRecognizer(),
    # Informational blocks
    HeapAtGcRecognizer(),
    TenuringDistributionRecognizer(),
    AdaptiveSizePolicyRecognizer(),
    ClassUnloadingRecognizer(),
    # Catch-alls
    GcInfoRecognizer(),
    UnifiedGcDetailRecognizer(),
)

__all__ = ["RECOGNIZERS", "Recognizer"]
