# farmlog/bootstrap.py

from typing import Optional

from .config import Settings, settings as default_settings
from .farm_store import FarmStore
from .sample_data import seed_sample_data
from .storage import open_backend


def open_store(config: Optional[Settings] = None) -> FarmStore:
    """Builds the one store the application owns: backend from settings, tables loaded, first-run seed applied."""
    config = config or default_settings
    store = FarmStore(open_backend(config))
    if config.seed_sample_data:
        seed_sample_data(store)
    print(f"---BOOTSTRAP: Store ready ({config.storage_backend} backend)---")
    return store
