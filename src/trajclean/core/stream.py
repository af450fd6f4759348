import logging
import math
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

import pandas as pd

from trajclean.errors import TrajectoryFormatError
from .point import GeoPoint

LOGGER = logging.getLogger(__name__)

DEFAULT_COLUMNS = {
    'lat': 'lat',
    'lng': 'lng',
    'timestamp': 'timestamp',
    'altitude': 'altitude',
    'speed': 'speed',
    'bearing': 'bearing',
    'accuracy': 'accuracy',
}

REQUIRED_FIELDS = ('lat', 'lng', 'timestamp')
OPTIONAL_FIELDS = ('altitude', 'speed', 'bearing', 'accuracy')


def _optional_float(value) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    if math.isnan(value):
        return None
    return value


def _to_epoch_millis(series: pd.Series) -> pd.Series:
    """
    Converts a timestamp column to float epoch milliseconds, NaN where missing.

    Numeric columns (int or float, blanks included) are already epoch
    milliseconds. Text columns are parsed as dates; unparsable cells become NaN.
    """
    numeric = pd.to_numeric(series, errors='coerce')
    if numeric.notna().sum() == series.notna().sum():
        return numeric.astype('float64')

    parsed = pd.to_datetime(series, errors='coerce', format='mixed', utc=True)
    return (parsed - pd.Timestamp(0, tz='UTC')) / pd.Timedelta(milliseconds=1)


class TrajectoryReader:
    """
    Loads a complete trajectory from a CSV file, one GeoPoint per row, in file order.
    """
    def __init__(
        self,
        filepath: str | Path,
        sep: str = ',',
        col_mapping: Dict[str, str] = None,
        chunksize: int = 1000,
    ):
        self.filepath = Path(filepath)
        self.sep = sep
        self.chunksize = chunksize
        self.mapping = dict(DEFAULT_COLUMNS)
        if col_mapping:
            self.mapping.update(col_mapping)

    def stream(self) -> Iterator[GeoPoint]:
        """
        Yields points from the file one by one.
        """
        header = pd.read_csv(self.filepath, nrows=0, sep=self.sep)
        missing = [f for f in REQUIRED_FIELDS if self.mapping[f] not in header.columns]
        if missing:
            raise TrajectoryFormatError(
                f"CSV must contain columns {[self.mapping[f] for f in REQUIRED_FIELDS]}. "
                f"Found: {list(header.columns)}"
            )
        present_optional = [f for f in OPTIONAL_FIELDS if self.mapping[f] in header.columns]

        ts_col = self.mapping['timestamp']
        with pd.read_csv(self.filepath, chunksize=self.chunksize, sep=self.sep) as reader:
            for chunk in reader:
                chunk[ts_col] = _to_epoch_millis(chunk[ts_col])

                for idx, row in chunk.iterrows():
                    try:
                        lat = float(row[self.mapping['lat']])
                        lng = float(row[self.mapping['lng']])
                        timestamp = float(row[ts_col])
                    except (TypeError, ValueError):
                        LOGGER.debug("Skipping row %s: unparsable coordinates or timestamp", idx)
                        continue
                    if math.isnan(lat) or math.isnan(lng):
                        LOGGER.debug("Skipping row %s: missing coordinates", idx)
                        continue
                    if math.isnan(timestamp):
                        LOGGER.debug("Skipping row %s: missing or unparsable timestamp", idx)
                        continue

                    extras = {f: _optional_float(row[self.mapping[f]]) for f in present_optional}
                    yield GeoPoint(
                        lat=lat,
                        lng=lng,
                        timestamp=int(round(timestamp)),
                        **extras,
                    )

    def read(self) -> List[GeoPoint]:
        points = list(self.stream())
        LOGGER.debug("Loaded %d points from %s", len(points), self.filepath)
        return points


def points_to_frame(points: Sequence[GeoPoint]) -> pd.DataFrame:
    """Tabulates points with the default column names."""
    columns = list(DEFAULT_COLUMNS.values())
    rows = [
        {
            'lat': p.lat,
            'lng': p.lng,
            'timestamp': p.timestamp,
            'altitude': p.altitude,
            'speed': p.speed,
            'bearing': p.bearing,
            'accuracy': p.accuracy,
        }
        for p in points
    ]
    return pd.DataFrame(rows, columns=columns)
