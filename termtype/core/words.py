from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from termtype.core.config import DIFFICULTIES, app_dir

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LanguagePack:
    name: str
    words: Dict[str, List[str]]


def bundled_words_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "words"


def user_words_dir() -> Path:
    return app_dir() / "languages"


def parse_pack(path: Path) -> LanguagePack:
    """Read a YAML word pack with a ``name`` and one word list per difficulty."""
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected YAML with 'name' and 'words'")
    name = raw.get("name")
    tiers = raw.get("words")
    if not name or not isinstance(name, str):
        raise ValueError(f"{path.name}: missing or invalid 'name'")
    if not isinstance(tiers, dict):
        raise ValueError(f"{path.name}: 'words' must map difficulty to a word list")

    words: Dict[str, List[str]] = {}
    for difficulty in DIFFICULTIES:
        content = tiers.get(difficulty)
        if content is None:
            raise ValueError(f"{path.name}: missing '{difficulty}' words")
        if isinstance(content, list):
            items = [str(item).strip() for item in content if str(item).strip()]
        else:
            # allow a whitespace separated block
            items = str(content).split()
        if not items:
            raise ValueError(f"{path.name}: '{difficulty}' has no words")
        words[difficulty] = items
    return LanguagePack(name=name.strip(), words=words)


class WordRepository:
    """Word source backed by YAML language packs.

    Bundled packs live in ``termtype/data/words``; packs dropped into
    ``~/.termtype/languages`` are added on top and win on name clashes.
    """

    def __init__(
        self,
        language: Optional[str] = None,
        rng: Optional[random.Random] = None,
        base_dir: Optional[Path] = None,
        user_dir: Optional[Path] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._packs = self._load_packs(base_dir or bundled_words_dir(), user_dir or user_words_dir())
        self._language = next(iter(self._packs))
        if language is not None:
            self.select(language)

    @property
    def language(self) -> str:
        return self._language

    def languages(self) -> List[str]:
        return list(self._packs)

    def pack(self, name: Optional[str] = None) -> LanguagePack:
        return self._packs[name or self._language]

    def select(self, language: str) -> None:
        if language not in self._packs:
            logger.warning("Unknown language %r, keeping %r", language, self._language)
            return
        self._language = language

    def next_batch(self, difficulty: str, count: int) -> List[str]:
        """Sample up to *count* distinct words; fewer when the list is shorter."""
        pool = self.pack().words[difficulty]
        return self._rng.sample(pool, min(max(count, 0), len(pool)))

    def _load_packs(self, base_dir: Path, user_dir: Path) -> Dict[str, LanguagePack]:
        if not base_dir.exists():
            raise FileNotFoundError(f"Word list directory not found: {base_dir}")

        packs: Dict[str, LanguagePack] = {}
        for path in sorted(base_dir.glob("*.yaml")):
            pack = parse_pack(path)
            packs[pack.name] = pack

        if user_dir.exists():
            for path in sorted(user_dir.glob("*.yaml")):
                try:
                    pack = parse_pack(path)
                except (OSError, ValueError, yaml.YAMLError) as e:
                    logger.warning("Skipping word pack %s: %s", path, e)
                    continue
                logger.info("Loaded user word pack %s from %s", pack.name, path)
                packs[pack.name] = pack

        if not packs:
            raise ValueError(f"No word packs (*.yaml) found in {base_dir}")
        return packs
