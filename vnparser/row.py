"""デコード済みの 1 行と、書き出し用のセル表現"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

from .codecs.data_decoder import render_value
from .config import RenderOptions
from .errors import DecodeError
from .types import ColumnMeta


class Cell(NamedTuple):
    index: int
    name: str
    value: Any
    text: str  # NULL は ""


@dataclass(frozen=True)
class Row:
    """
    1 行分のデコード結果

    values はスキーマ順で、NULL 列は None。
    columns はスキーマ（ColumnMeta のタプル）への参照で、行ごとにコピーしない。
    """
    ordinal: int
    values: Tuple[Any, ...]
    columns: Tuple[ColumnMeta, ...]

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> Any:
        return self.values[index]

    def cells(self, options: Optional[RenderOptions] = None) -> Iterator[Cell]:
        for meta, value in zip(self.columns, self.values):
            try:
                text = render_value(value, meta, options)
            except DecodeError as e:
                raise DecodeError(str(e), column=meta.index, row=self.ordinal) from e
            yield Cell(meta.index, meta.name, value, text)

    def render(self, options: Optional[RenderOptions] = None) -> List[str]:
        """各列の正規テキスト"""
        return [cell.text for cell in self.cells(options)]

    def as_dict(self) -> Dict[str, Any]:
        """列名 → 値（名前のない列は col{index}）"""
        return {(m.name or f"col{m.index}"): v for m, v in zip(self.columns, self.values)}


__all__ = ["Row", "Cell"]
