"""Services for lists business logic."""

from .exceptions import ListsServiceError, ListNotFoundError, ItemNotFoundError
from .cursors import encode_cursor, decode_cursor
from .shopping import (
    clamp_limit,
    list_lists,
    create_list,
    get_list,
    update_list,
    delete_list,
    add_item,
    update_item,
    delete_item,
    set_purchased,
    pending_items_page,
    history_page,
)

__all__ = [
    # Exceptions
    'ListsServiceError',
    'ListNotFoundError',
    'ItemNotFoundError',
    # Cursors
    'encode_cursor',
    'decode_cursor',
    # Services
    'clamp_limit',
    'list_lists',
    'create_list',
    'get_list',
    'update_list',
    'delete_list',
    'add_item',
    'update_item',
    'delete_item',
    'set_purchased',
    'pending_items_page',
    'history_page',
]
