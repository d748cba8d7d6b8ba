"""
samples.py - Default region datasets for demos and first runs

Seven Metro Manila cities, ten relief items each.
"""

from __future__ import annotations
from typing import Dict, List, Tuple

from .persistence import PersistenceBridge


SAMPLE_REGIONS: Dict[str, List[Tuple[str, int]]] = {
    "Mandaluyong": [
        ("canned_goods", 150), ("water_bottles", 200), ("rice", 250),
        ("noodles", 180), ("medicine", 120), ("blankets", 130),
        ("clothes", 170), ("diapers", 140), ("fuel", 110), ("first_aid", 160),
    ],
    "Caloocan": [
        ("canned_goods", 220), ("water_bottles", 210), ("rice", 300),
        ("noodles", 190), ("medicine", 130), ("blankets", 150),
        ("clothes", 200), ("diapers", 160), ("fuel", 180), ("first_aid", 170),
    ],
    "Manila": [
        ("canned_goods", 230), ("water_bottles", 250), ("rice", 280),
        ("noodles", 210), ("medicine", 150), ("blankets", 170),
        ("clothes", 190), ("diapers", 180), ("fuel", 200), ("first_aid", 190),
    ],
    "Paranaque": [
        ("canned_goods", 200), ("water_bottles", 300), ("rice", 260),
        ("noodles", 220), ("medicine", 180), ("blankets", 190),
        ("clothes", 210), ("diapers", 230), ("fuel", 240), ("first_aid", 250),
    ],
    "Pasay": [
        ("canned_goods", 210), ("water_bottles", 310), ("rice", 270),
        ("noodles", 230), ("medicine", 190), ("blankets", 200),
        ("clothes", 220), ("diapers", 240), ("fuel", 250), ("first_aid", 260),
    ],
    "QuezonCity": [
        ("canned_goods", 240), ("water_bottles", 320), ("rice", 290),
        ("noodles", 250), ("medicine", 210), ("blankets", 220),
        ("clothes", 230), ("diapers", 260), ("fuel", 270), ("first_aid", 280),
    ],
    "Pasig": [
        ("canned_goods", 250), ("water_bottles", 330), ("rice", 300),
        ("noodles", 260), ("medicine", 220), ("blankets", 230),
        ("clothes", 240), ("diapers", 270), ("fuel", 280), ("first_aid", 290),
    ],
}


def initialize_sample_files(persistence: PersistenceBridge) -> List[str]:
    """
    Write each sample region whose source does not exist yet.

    Existing sources are never overwritten.

    Returns:
        Names of the regions that were written
    """
    created = []
    for region, records in SAMPLE_REGIONS.items():
        if persistence.has_source(region):
            continue
        persistence.save_records(region, records)
        created.append(region)
    return created
