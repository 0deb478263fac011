"""Collect OTU counts from usearch hits.

``collect_otus`` counts records with ``TYPE == "H"`` per target ``S_ID``
and ``SAMPLE``, weighted by ``SEQ_COUNT`` when present. All records pass
through; one OTU record per target follows, with a ``<SAMPLE>_COUNT``
column for every sample seen::

    {"RECORD_TYPE": "OTU", "OTU": "OTU_0", "CM1_COUNT": 881, "CM2_COUNT": 0}

Usage::

    collect_otus()
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, DefaultDict, Dict, Iterable, Iterator

from ..errors import RecordError
from ..options import options_allowed
from ..status import Status, status_init

Record = Dict[str, Any]

STATS = ("records_in", "records_out", "hits_in", "hits_out")


class CollectOtus:
    """Count usearch hits per OTU and sample."""

    def __init__(self, options: Dict[str, Any]):
        options_allowed(options)

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status, STATS)
        counts: DefaultDict[str, DefaultDict[str, int]] = defaultdict(lambda: defaultdict(int))

        for record in input:
            status["records_in"] += 1

            if record.get("TYPE") == "H":
                if record.get("S_ID") is None or record.get("SAMPLE") is None:
                    raise RecordError(f"Hit without S_ID or SAMPLE: {record!r}")
                sample = str(record["SAMPLE"]).upper()
                counts[str(record["S_ID"])][sample] += record.get("SEQ_COUNT") or 1
                status["hits_in"] += 1

            status["records_out"] += 1
            yield record

        samples = sorted({sample for per_sample in counts.values() for sample in per_sample})

        for otu, per_sample in counts.items():
            otu_record: Record = {"RECORD_TYPE": "OTU", "OTU": otu}
            for sample in samples:
                otu_record[f"{sample}_COUNT"] = per_sample.get(sample, 0)

            status["hits_out"] += 1
            status["records_out"] += 1
            yield otu_record
