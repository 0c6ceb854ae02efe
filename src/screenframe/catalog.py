"""
Catalog module.

The catalog is the read-only reference data the composition draws from: an
ordered table of :py:class:`Background` images and an ordered table of
:py:class:`Effect` filters. It is loaded once and shared by every session;
entries are frozen and the tables are tuples, so nothing can mutate them.

Example::

    from screenframe.catalog import default_catalog

    catalog = default_catalog()
    background = catalog.background(0)
    effect = catalog.effect(3)
    print(background.url, effect.filter_expression)
"""

import logging
from typing import Iterable, Optional

from attrs import define, field

from screenframe.validators import range_

logger = logging.getLogger(__name__)

#: Free-to-use background images shipped with the editor.
BACKGROUND_URLS = (
    "https://images.unsplash.com/photo-1557683316-973673baf926?w=1600&h=900&fit=crop",
    "https://images.unsplash.com/photo-1560015534-cee980ba7e13?w=1600&h=900&fit=crop",
    "https://images.unsplash.com/photo-1501696461415-6bd6660c6742?w=1600&h=900&fit=crop",
)

EFFECT_COUNT = 100


@define(frozen=True)
class Background:
    """
    Background image entry.

    .. py:attribute:: id
    .. py:attribute:: name
    .. py:attribute:: url

        Image reference: ``http(s)`` URL, ``file://`` URL, ``data:`` URI or a
        local path.
    """

    id: int = field(validator=range_(0, 2**31 - 1))
    name: str
    url: str


@define(frozen=True)
class Effect:
    """
    Filter effect entry.

    .. py:attribute:: id
    .. py:attribute:: name
    .. py:attribute:: filter_expression

        CSS filter expression, e.g. ``blur(3px)``.
    """

    id: int = field(validator=range_(0, 2**31 - 1))
    name: str
    filter_expression: str


def _unique_ids(instance, attribute, value):
    ids = [entry.id for entry in value]
    if len(ids) != len(set(ids)):
        raise ValueError(f"Duplicate ids in {attribute.name}: {ids!r}")


@define(frozen=True)
class Catalog:
    """
    Immutable table of backgrounds and effects.
    """

    backgrounds: tuple[Background, ...] = field(
        default=(), converter=tuple, validator=_unique_ids
    )
    effects: tuple[Effect, ...] = field(
        default=(), converter=tuple, validator=_unique_ids
    )

    def background(self, background_id: int) -> Background:
        """Look up a background by id.

        Raises:
            KeyError: If no background has the given id
        """
        for entry in self.backgrounds:
            if entry.id == background_id:
                return entry
        raise KeyError(f"No background with id {background_id!r}")

    def effect(self, effect_id: int) -> Effect:
        """Look up an effect by id.

        Raises:
            KeyError: If no effect has the given id
        """
        for entry in self.effects:
            if entry.id == effect_id:
                return entry
        raise KeyError(f"No effect with id {effect_id!r}")

    def find_background(self, name: str) -> Optional[Background]:
        return next((b for b in self.backgrounds if b.name == name), None)

    def find_effect(self, name: str) -> Optional[Effect]:
        return next((e for e in self.effects if e.name == name), None)


def make_backgrounds(urls: Iterable[str]) -> tuple[Background, ...]:
    """Build numbered backgrounds, ``Background 1`` onwards."""
    return tuple(
        Background(id=i, name=f"Background {i + 1}", url=url)
        for i, url in enumerate(urls)
    )


def make_blur_effects(count: int = EFFECT_COUNT) -> tuple[Effect, ...]:
    """Build numbered effects cycling through blur radii 0 to 9 px."""
    return tuple(
        Effect(id=i, name=f"Effect {i + 1}", filter_expression=f"blur({i % 10}px)")
        for i in range(count)
    )


_DEFAULT_CATALOG: Optional[Catalog] = None


def default_catalog() -> Catalog:
    """Return the built-in catalog, created on first use."""
    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        _DEFAULT_CATALOG = Catalog(
            backgrounds=make_backgrounds(BACKGROUND_URLS),
            effects=make_blur_effects(),
        )
        logger.debug(
            "Loaded default catalog: %d backgrounds, %d effects"
            % (len(_DEFAULT_CATALOG.backgrounds), len(_DEFAULT_CATALOG.effects))
        )
    return _DEFAULT_CATALOG
