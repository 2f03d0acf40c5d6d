from abc import ABC, abstractmethod
from typing import List, Optional

from meatshop.domain.schemas import ProductCreate, ProductOut, ProductUpdate

class IProductRepository(ABC):
    @abstractmethod
    def list_products(self, category: Optional[str] = None) -> List[ProductOut]:
        pass

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[ProductOut]:
        pass

    @abstractmethod
    def create_product(self, data: ProductCreate) -> ProductOut:
        pass

    @abstractmethod
    def update_product(self, product_id: int, data: ProductUpdate) -> Optional[ProductOut]:
        pass

    @abstractmethod
    def delete_product(self, product_id: int) -> bool:
        pass
