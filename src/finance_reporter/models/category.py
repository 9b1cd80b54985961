"""Expense category model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Category:
    """User-defined expense category.

    Attributes:
        id: Unique identifier for this category.
        name: Human-readable category name.
        owner_id: Identity of the user who owns the category.
    """

    id: str
    name: str
    owner_id: str

    @classmethod
    def from_dict(cls, data: dict[str, object], owner_id: str | None = None) -> "Category":
        """Create a Category from a dictionary (e.g., from a YAML ledger).

        Args:
            data: Dictionary containing category data.
            owner_id: Owner to use when the entry does not name one.

        Returns:
            A new Category instance.
        """
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            owner_id=str(data.get("owner", owner_id or "")),
        )

    def to_dict(self) -> dict[str, object]:
        """JSON-shaped representation."""
        return {"_id": self.id, "name": self.name, "user": self.owner_id}
