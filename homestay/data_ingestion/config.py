import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PACKAGED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class IngestionConfig:
    """
    Where the seed CSV files for the record store live.
    """

    data_dir: Path = Path(os.getenv("HOMESTAY_DATA_DIR", str(_PACKAGED_DATA_DIR)))
    properties_filename: str = "properties.csv"
    users_filename: str = "users.csv"
    interactions_filename: str = "interactions.csv"

    @property
    def properties_path(self) -> Path:
        return self.data_dir / self.properties_filename

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_filename

    @property
    def interactions_path(self) -> Path:
        return self.data_dir / self.interactions_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
