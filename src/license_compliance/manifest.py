"""
License manifest reading and writing.

One line per component::

    name, license-url-or-Unknown, license-expression[, license-path]

The manifest links the scan step with the save step and is meant to be
reviewed, and edited if needed, by a human in between.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .classifier import TypeOverrides
from .errors import ManifestError
from .licenses import LicenseType
from .resolver import expression_type

SEPARATOR = ", "
UNKNOWN = "Unknown"
COMMENT = "#"


@dataclass(frozen=True)
class ManifestRow:
    name: str
    license: str
    url: str = ""
    path: str = ""  # license file, relative to the component root

    def license_type(self, overrides: Optional[TypeOverrides] = None) -> LicenseType:
        return expression_type(self.license, overrides)

    def to_line(self) -> str:
        name = self.name.strip()
        if not name:
            raise ManifestError("manifest rows need a component name")
        if name.startswith(COMMENT):
            raise ManifestError(f"{name}: component names cannot start with {COMMENT!r}")
        fields = [name, self.url.strip() or UNKNOWN, self.license.strip() or UNKNOWN]
        if self.path.strip():
            fields.append(self.path.strip())
        for field in fields:
            if SEPARATOR.strip() in field or "\n" in field:
                raise ManifestError(f"{self.name}: manifest fields cannot contain commas or newlines: {field!r}")
        return SEPARATOR.join(fields)

    @classmethod
    def from_line(cls, line: str, line_number: int = 0) -> "ManifestRow":
        fields = [field.strip() for field in line.split(SEPARATOR)]
        if len(fields) not in (3, 4) or not fields[0]:
            raise ManifestError(
                f"line {line_number}: expected 'name, url, license[, path]', got {line!r}",
                context={"line": line_number},
            )
        name, url, license = fields[:3]
        path = fields[3] if len(fields) == 4 else ""
        return cls(
            name=name,
            license=license,
            url="" if url == UNKNOWN else url,
            path=path,
        )


def dumps(rows: Iterable[ManifestRow]) -> str:
    return "".join(row.to_line() + "\n" for row in rows)


def loads(text: str) -> List[ManifestRow]:
    rows = []
    for line_number, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith(COMMENT):
            continue
        rows.append(ManifestRow.from_line(line, line_number))
    return rows


def dump(rows: Iterable[ManifestRow], path: Union[str, Path]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps(rows))


def load(path: Union[str, Path]) -> List[ManifestRow]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise ManifestError(f"Failed to read license manifest {path}: {e}", context={"path": str(path)}) from e
    try:
        return loads(text)
    except ManifestError as e:
        raise ManifestError(f"{path}: {e.message}", context={**e.context, "path": str(path)}) from e
