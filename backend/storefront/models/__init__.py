from .product import Product, ProductCharacteristic
