"""
Validation functions for attr.
"""

import math

import attr
from attr.validators import in_

__all__ = ["in_", "range_", "finite"]


@attr.s(repr=False, slots=True, hash=True)
class _RangeValidator(object):
    minimum = attr.ib()
    maximum = attr.ib()
    exclude_minimum = attr.ib(default=False)

    def __call__(self, inst, attr, value):
        try:
            if self.exclude_minimum:
                range_options = self.minimum < value and value <= self.maximum
            else:
                range_options = self.minimum <= value and value <= self.maximum
        except TypeError:
            range_options = False

        if not range_options:
            raise ValueError(
                "'{name}' must be in range {left}{minimum!r}, {maximum!r}]: "
                "{value!r}".format(
                    name=attr.name,
                    left="(" if self.exclude_minimum else "[",
                    minimum=self.minimum,
                    maximum=self.maximum,
                    value=value,
                )
            )

    def __repr__(self):
        return "<range_ validator with {left}{minimum!r}, {maximum!r}]>".format(
            left="(" if self.exclude_minimum else "[",
            minimum=self.minimum,
            maximum=self.maximum,
        )


def range_(minimum, maximum, exclude_minimum=False):
    """
    A validator that raises a :exc:`ValueError` if the initializer is called
    with a value that does not belong in the [minimum, maximum] range. The
    check is performed using ``minimum <= value and value <= maximum``, or
    ``minimum < value`` when ``exclude_minimum`` is set.
    """
    return _RangeValidator(minimum, maximum, exclude_minimum)


def finite(inst, attr, value):
    """A validator that rejects NaN and infinite numbers."""
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError("'{name}' must be a finite number: {value!r}".format(
            name=attr.name, value=value
        ))
