from .auth_use_cases import GetAuthenticatedUser, LoginUser, LogoutUser
from .product_use_cases import (
    AssociateProductWithUser,
    CreatedProduct,
    CreateProduct,
    DeleteProduct,
    DisassociateProductFromUser,
    GetProductById,
    IncreaseProductStock,
    ListProducts,
    ProductListItem,
    ProductOutput,
    ReduceProductStock,
)
from .user_use_cases import (
    DeleteUser,
    GetUserByEmail,
    GetUserById,
    GetUserWithProducts,
    RegisteredUser,
    RegisterUser,
    UserOutput,
    UserWithProducts,
)

__all__ = [
    "AssociateProductWithUser",
    "CreateProduct",
    "CreatedProduct",
    "DeleteProduct",
    "DeleteUser",
    "DisassociateProductFromUser",
    "GetAuthenticatedUser",
    "GetProductById",
    "GetUserByEmail",
    "GetUserById",
    "GetUserWithProducts",
    "IncreaseProductStock",
    "ListProducts",
    "LoginUser",
    "LogoutUser",
    "ProductListItem",
    "ProductOutput",
    "ReduceProductStock",
    "RegisterUser",
    "RegisteredUser",
    "UserOutput",
    "UserWithProducts",
]
