#!filepath: maxent/artifact/model_store.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Union

from maxent.artifact.model_artifact import load_model
from maxent.model.base_model import AbstractModel
from maxent.utils.lazy_cache import LazyCache
from maxent.utils.logger import logs


class ModelStore:
    """
    Per-path model cache.

    - each artifact is read at most once per store
    - concurrent callers asking for a path being loaded wait for
      that same load
    - paths are resolved, so ``a/../m.bin`` and ``m.bin`` share a slot
    """

    def __init__(self, loader: Optional[Callable[[Path], AbstractModel]] = None):
        self._loader = loader or load_model
        self._cache: LazyCache[Path, AbstractModel] = LazyCache(self._load)

    def _load(self, path: Path) -> AbstractModel:
        logs.info(f"[ModelStore] loading {path}")
        return self._loader(path)

    def get(self, path: Union[str, Path]) -> AbstractModel:
        return self._cache.get(Path(path).resolve())

    def __contains__(self, path: Union[str, Path]) -> bool:
        return Path(path).resolve() in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        self._cache.clear()
