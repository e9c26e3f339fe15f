"""Query models for the GP element endpoints."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OutputFormat(str, Enum):
    """Output formats accepted by the ``FORMAT`` parameter."""

    TLE = "TLE"
    THREE_LE = "3LE"
    TWO_LE = "2LE"
    XML = "XML"
    KVN = "KVN"
    JSON = "JSON"
    JSON_PRETTY = "JSON-PRETTY"
    CSV = "CSV"


DEFAULT_FORMAT = OutputFormat.TLE


class Endpoint(str, Enum):
    """Element endpoints under ``/NORAD/elements/``.

    - GP: Current element sets
    - GP_FIRST: First element sets available
    - GP_LAST: Last element sets available
    - TABLE: Tabular listing, honors ``TableFlags``
    """

    GP = "gp.php"
    GP_FIRST = "gp-first.php"
    GP_LAST = "gp-last.php"
    TABLE = "table.php"


class SelectorKey(str, Enum):
    """Query parameter names of the mutually exclusive selectors."""

    CATNR = "CATNR"
    INTDES = "INTDES"
    GROUP = "GROUP"
    NAME = "NAME"
    SPECIAL = "SPECIAL"


class TableFlags(BaseModel):
    """Optional flags for ``table.php`` queries.

    Ignored for every other endpoint.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    bstar: bool = Field(
        default=False, description="Show BSTAR value instead of eccentricity"
    )
    show_ops: bool = Field(default=False, description="Show operational status flag")
    oldest: bool = Field(
        default=False, description="Only objects with data older than 3.5 days"
    )
    docked: bool = Field(default=False, description="Only docked objects")
    movers: bool = Field(
        default=False, description="Only GEO objects drifting more than 0.1 deg/day"
    )

    def enabled_params(self) -> list[str]:
        """Parameter names of the enabled flags, in wire order.

        Returns:
            List of parameter names.
        """
        flags = [
            ("BSTAR", self.bstar),
            ("SHOW-OPS", self.show_ops),
            ("OLDEST", self.oldest),
            ("DOCKED", self.docked),
            ("MOVERS", self.movers),
        ]
        return [name for name, enabled in flags if enabled]


class Query(BaseModel):
    """A query usable with any element endpoint.

    Exactly one of ``catnr``, ``intdes``, ``group``, ``name`` or ``special``
    must be non-blank when the URL is built. The model itself accepts any
    combination; validation happens in :func:`celestrak.query.builder.build_url`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    catnr: str = Field(default="", description="Catalog number (NORAD ID)")
    intdes: str = Field(default="", description="International designator (yyyy-nnn)")
    group: str = Field(default="", description="Group name, e.g. STATIONS")
    name: str = Field(default="", description="Satellite name (partial match)")
    special: str = Field(default="", description="Special dataset: GPZ, GPZ-PLUS, DECAYING")
    format: OutputFormat | None = Field(
        default=None, description="Output format, TLE when unset"
    )
    table_flags: TableFlags = Field(default_factory=TableFlags)

    @classmethod
    def by_catnr(cls, catnr: str, fmt: OutputFormat | None = None) -> "Query":
        """Create a query by catalog number."""
        return cls(catnr=catnr, format=fmt)

    @classmethod
    def by_intdes(cls, intdes: str, fmt: OutputFormat | None = None) -> "Query":
        """Create a query by international designator."""
        return cls(intdes=intdes, format=fmt)

    @classmethod
    def by_group(cls, group: str, fmt: OutputFormat | None = None) -> "Query":
        """Create a query by group name."""
        return cls(group=group, format=fmt)

    @classmethod
    def by_name(cls, name: str, fmt: OutputFormat | None = None) -> "Query":
        """Create a query by satellite name."""
        return cls(name=name, format=fmt)

    @classmethod
    def by_special(cls, special: str, fmt: OutputFormat | None = None) -> "Query":
        """Create a query for a special dataset."""
        return cls(special=special, format=fmt)

    @property
    def resolved_format(self) -> OutputFormat:
        """Output format with the default applied."""
        return self.format or DEFAULT_FORMAT

    def selectors(self) -> list[tuple[SelectorKey, str]]:
        """Selector fields in parameter order, values trimmed.

        Returns:
            List of (key, trimmed value) pairs, including blank ones.
        """
        return [
            (SelectorKey.CATNR, self.catnr.strip()),
            (SelectorKey.INTDES, self.intdes.strip()),
            (SelectorKey.GROUP, self.group.strip()),
            (SelectorKey.NAME, self.name.strip()),
            (SelectorKey.SPECIAL, self.special.strip()),
        ]

    def build_url(self, base: str | None, endpoint: "Endpoint | str") -> str:
        """Build the fully-qualified URL for an endpoint.

        See :func:`celestrak.query.builder.build_url`.
        """
        from celestrak.query.builder import build_url

        return build_url(self, base, endpoint)
