# product_api/models/product.py
from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Numeric, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from product_api.database import Base


class Product(Base):
    """
    Singura resursă expusă de API.

    Note:
    - `id` e atribuit de store la insert și nu se mai schimbă.
    - `name` NOT NULL, fără unicitate.
    - `price` NUMERIC(10,2) NOT NULL DEFAULT 0.00; semnul nu e validat.
    """
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
        server_default=text("0.00"),
    )

    def __repr__(self) -> str:
        # scurtează numele în repr pentru loguri mai curate
        name_preview = (self.name[:32] + "…") if self.name and len(self.name) > 33 else self.name
        return f"<Product id={self.id!r} name={name_preview!r} price={self.price!r}>"
