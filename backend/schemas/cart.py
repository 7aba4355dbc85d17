from pydantic import BaseModel, Field, field_validator
from typing import Annotated, List, Literal, Optional, Tuple, Union

# Cart entries travel between the browser session and the server as plain
# records keyed by the storefront's field names (tipo, nombre, precio, ...).
# Entries are frozen: once in the cart only quantity changes, via model_copy.

PREDEFINED_KIND = "Canasta"
CANDY_KIND = "Dulce"
CONFIGURED_KIND = "Canasta_Configurada"


# One extra candy chosen while customizing a basket
class SelectionLine(BaseModel):
    candy_id: int = Field(alias="id")
    name: str = Field(alias="nombre")
    unit_price: float = Field(alias="precio", ge=0)
    quantity: int = Field(alias="cantidad", ge=1)

    class Config:
        populate_by_name = True
        frozen = True


class PredefinedBasketEntry(BaseModel):
    kind: Literal["Canasta"] = Field(alias="tipo")
    entry_id: Optional[str] = Field(None, alias="entrada")
    product_id: int = Field(alias="id")
    name: str = Field(alias="nombre")
    price: float = Field(alias="precio", ge=0)
    quantity: int = Field(1, alias="cantidad", ge=1)

    class Config:
        populate_by_name = True
        frozen = True


class StandaloneCandyEntry(BaseModel):
    kind: Literal["Dulce"] = Field(alias="tipo")
    entry_id: Optional[str] = Field(None, alias="entrada")
    product_id: int = Field(alias="id")
    name: str = Field(alias="nombre")
    price: float = Field(alias="precio", ge=0)
    quantity: int = Field(1, alias="cantidad", ge=1)

    class Config:
        populate_by_name = True
        frozen = True


class ConfiguredBasketEntry(BaseModel):
    kind: Literal["Canasta_Configurada"] = Field(alias="tipo")
    entry_id: Optional[str] = Field(None, alias="entrada")
    basket_id: int = Field(alias="id_canasta_original")
    name: str = Field(alias="nombre")
    # Informational; checkout reprices from the catalog
    base_price: Optional[float] = Field(None, alias="precio_base", ge=0)
    extra_cost: float = Field(0.0, alias="costo_extra", ge=0)
    final_total: float = Field(alias="precio_final", ge=0)
    # A configured basket is always a single unit; another one is a new entry
    quantity: Literal[1] = Field(1, alias="cantidad")
    selection: Tuple[SelectionLine, ...] = Field((), alias="detalle_personalizado")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def price(self) -> float:
        return self.final_total


# `tipo` selects the variant; records without it are rejected
CartEntry = Annotated[
    Union[PredefinedBasketEntry, StandaloneCandyEntry, ConfiguredBasketEntry],
    Field(discriminator="kind"),
]


# Cart as sent by the client
class CartIn(BaseModel):
    carrito: List[CartEntry] = []

# Cart returned to the client after every operation
class CartOut(BaseModel):
    carrito: List[dict]
    total: float

# Request schema for adding a catalog basket or candy to the cart
class CartAddItem(CartIn):
    tipo: Literal["Canasta", "Dulce"]
    id: int

class CartRemoveItem(CartIn):
    entrada: str

class CartUpdateItem(CartIn):
    entrada: str
    cantidad: int = Field(gt=0)


# Customization request: the selection the client holds so far
class SelectionIn(BaseModel):
    seleccion: List[SelectionLine] = []

class SelectionChange(SelectionIn):
    candy_id: int

class SelectionConfirm(SelectionIn):
    carrito: List[CartEntry] = []

# Customization state returned to the client
class CustomizationOut(BaseModel):
    basket_id: int
    seleccion: List[dict]
    base_price: float
    extra_cost: float
    final_total: float
    remaining_capacity: int
    can_confirm: bool

    @field_validator("extra_cost", "final_total", "base_price")
    @classmethod
    def _round_money(cls, value: float) -> float:
        return round(value, 2)
