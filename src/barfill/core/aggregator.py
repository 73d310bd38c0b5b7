"""Grouping of finished bars into a bar schedule."""

from barfill.domain import Bar, BarGroup, BarGroupKey, round_half_away


class BarAggregator:
    """Groups bars by orientation and rounded length.

    Each group keeps a repetition count and the identifiers of its bars in
    the order they were added. Bars without a host handle are identified
    by their run index.
    """

    def __init__(self, precision: int = 2) -> None:
        self.precision = precision
        self._handles: dict[BarGroupKey, list[str]] = {}
        self._total_length = 0.0

    def add(self, bar: Bar) -> BarGroupKey:
        """Add a bar to its group, creating the group if needed."""
        key = BarGroupKey(axis=bar.axis, length=round_half_away(bar.length, self.precision))
        self._handles.setdefault(key, []).append(
            bar.handle if bar.handle is not None else str(bar.index)
        )
        self._total_length += bar.length
        return key

    def add_all(self, bars: list[Bar]) -> None:
        for bar in bars:
            self.add(bar)

    def groups(self) -> list[BarGroup]:
        """Frozen groups sorted by axis (horizontal first) then ascending length."""
        return [
            BarGroup(key=key, repetition=len(handles), handles=tuple(handles))
            for key, handles in sorted(self._handles.items(), key=lambda item: item[0].sort_key())
        ]

    @property
    def total_bars(self) -> int:
        return sum(len(handles) for handles in self._handles.values())

    @property
    def total_length(self) -> float:
        """Unrounded sum of all added bar lengths."""
        return self._total_length
