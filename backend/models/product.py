from sqlalchemy import Column, Integer, String, Text, Numeric, CheckConstraint
from database import Base

# Model Product
# A catalog entry. The SKU is the identifier shared with the supplier's
# inventory service; price is stored as fixed-point with two decimals.
class Product(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_products_price_non_negative"),)

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
