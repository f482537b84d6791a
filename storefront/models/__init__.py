from storefront.models.user import User
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.review import Review
from storefront.models.cart import CartItem
from storefront.models.address import Address
from storefront.models.coupon import Coupon
from storefront.models.shipping_region import ShippingRegion
from storefront.models.gst_settings import GSTSettings
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.models.order_event import OrderEvent
from storefront.models.invoice import Invoice

# add ALL models here
