import logging
from typing import List, Optional

from sqlalchemy import asc, select

from meatshop.domain.models import Product
from meatshop.domain.schemas import ProductCreate, ProductOut, ProductUpdate
from meatshop.infrastructure.database import SessionLocal
from meatshop.interfaces.IProductRepository import IProductRepository

logger = logging.getLogger(__name__)


class SqlAlchemyProductRepository(IProductRepository):
    """Catalog reads and admin writes. No caching, no pagination."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def list_products(self, category: Optional[str] = None) -> List[ProductOut]:
        query = select(Product).order_by(asc(Product.id))
        if category:
            query = query.where(Product.category == category)
        with self.session_factory() as session:
            return [ProductOut.model_validate(p) for p in session.execute(query).scalars().all()]

    def get_product(self, product_id: int) -> Optional[ProductOut]:
        with self.session_factory() as session:
            product = session.get(Product, product_id)
            return ProductOut.model_validate(product) if product else None

    def create_product(self, data: ProductCreate) -> ProductOut:
        with self.session_factory() as session, session.begin():
            product = Product(**data.model_dump())
            session.add(product)
            session.flush()
            logger.info("Product %s created (%s)", product.id, product.name)
            return ProductOut.model_validate(product)

    def update_product(self, product_id: int, data: ProductUpdate) -> Optional[ProductOut]:
        changes = data.model_dump(exclude_none=True)  # null means "leave as is"
        with self.session_factory() as session, session.begin():
            product = session.get(Product, product_id)
            if product is None:
                return None
            for field, value in changes.items():
                setattr(product, field, value)
            session.flush()
            return ProductOut.model_validate(product)

    def delete_product(self, product_id: int) -> bool:
        with self.session_factory() as session, session.begin():
            product = session.get(Product, product_id)
            if product is None:
                return False
            session.delete(product)
            logger.info("Product %s deleted", product_id)
            return True
