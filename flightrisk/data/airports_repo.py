from __future__ import annotations

import csv
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from shapely.geometry import Point, Polygon, box

DATA_DIR = Path(__file__).resolve().parent
AIRPORTS_PATH = DATA_DIR / "airports_ru.csv"
REGIONS_PATH = DATA_DIR / "regions_ru.csv"


@dataclass(frozen=True)
class Airport:
    id: str
    name: str
    city: str
    lat: float
    lon: float
    region: Optional[str] = None


@dataclass(frozen=True)
class Region:
    id: str
    name: str
    bounds: Tuple[Tuple[float, float], Tuple[float, float]]  # ((lat_min, lon_min), (lat_max, lon_max))

    @property
    def polygon(self) -> Polygon:
        (lat_min, lon_min), (lat_max, lon_max) = self.bounds
        return box(lon_min, lat_min, lon_max, lat_max)  # lon/lat order

    def contains(self, lat: float, lon: float) -> bool:
        return self.polygon.intersects(Point(lon, lat))


class AirportsRepo:
    """
    Static dispatcher reference data. Loaded once on first use; nothing
    mutates it afterwards.
    """

    def __init__(self, airports_path: Path = AIRPORTS_PATH, regions_path: Path = REGIONS_PATH):
        self.airports_path = airports_path
        self.regions_path = regions_path
        self._by_id: Dict[str, Airport] = {}
        self._all: List[Airport] = []
        self._regions: Dict[str, Region] = {}
        self._loaded = False
        self._lock = threading.Lock()

    def load(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            self._load_airports()
            self._load_regions()
            self._loaded = True

    def _load_airports(self) -> None:
        if not self.airports_path.exists():
            raise FileNotFoundError(f"Airport dataset not found at {self.airports_path}.")

        with self.airports_path.open("r", encoding="utf-8") as f:
            for row in csv.DictReader(f):
                airport_id = (row.get("id") or "").strip().upper()
                if not airport_id:
                    continue
                rec = Airport(
                    id=airport_id,
                    name=(row.get("name") or "").strip(),
                    city=(row.get("city") or "").strip(),
                    lat=float(row["lat"]),
                    lon=float(row["lon"]),
                    region=(row.get("region") or "").strip() or None,
                )
                # first wins on duplicate ids
                if airport_id in self._by_id:
                    continue
                self._by_id[airport_id] = rec
                self._all.append(rec)

    def _load_regions(self) -> None:
        if not self.regions_path.exists():
            return
        with self.regions_path.open("r", encoding="utf-8") as f:
            for row in csv.DictReader(f):
                region_id = (row.get("id") or "").strip()
                if not region_id:
                    continue
                self._regions[region_id] = Region(
                    id=region_id,
                    name=(row.get("name") or "").strip(),
                    bounds=(
                        (float(row["lat_min"]), float(row["lon_min"])),
                        (float(row["lat_max"]), float(row["lon_max"])),
                    ),
                )

    def get(self, airport_id: str) -> Optional[Airport]:
        self.load()
        return self._by_id.get((airport_id or "").strip().upper())

    def all(self) -> List[Airport]:
        self.load()
        return list(self._all)

    def cities(self) -> List[str]:
        return sorted({a.city for a in self.all()})

    def by_city(self, city: str) -> List[Airport]:
        city = (city or "").strip().lower()
        return [a for a in self.all() if a.city.lower() == city]

    def regions(self) -> List[Region]:
        self.load()
        return list(self._regions.values())

    def get_region(self, region_id: Optional[str]) -> Optional[Region]:
        self.load()
        return self._regions.get(region_id or "")

    def regions_for(self, *airports: Airport) -> List[Region]:
        """Regions to highlight for a route: declared regions first, else any box containing the airport."""
        out: List[Region] = []
        for a in airports:
            region = self.get_region(a.region)
            matches = [region] if region else [r for r in self.regions() if r.contains(a.lat, a.lon)]
            for r in matches:
                if r not in out:
                    out.append(r)
        return out

    def search(self, q: str, limit: int = 10) -> List[Tuple[Airport, int]]:
        """
        Returns list of (record, score) sorted by score desc.
        Good enough for a dispatcher picker over a small set.
        """
        self.load()
        q = (q or "").strip().lower()
        if not q:
            return []

        def score(rec: Airport) -> int:
            code = rec.id.lower()
            name = rec.name.lower()
            city = rec.city.lower()

            if q == code:
                return 100

            s = 0
            if code.startswith(q):
                s = max(s, 90)
            if city.startswith(q):
                s = max(s, 75)
            if name.startswith(q):
                s = max(s, 70)
            if q in city:
                s = max(s, 55)
            if q in name:
                s = max(s, 50)
            if rec.region and q in rec.region.lower():
                s = max(s, 30)
            return s

        scored = [(rec, score(rec)) for rec in self._all]
        scored = [x for x in scored if x[1] > 0]
        scored.sort(key=lambda x: x[1], reverse=True)
        return scored[: max(1, min(limit, 50))]


# singleton repo for the app
airports_repo = AirportsRepo()
