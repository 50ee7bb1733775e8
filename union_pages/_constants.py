"""Common literal values used across union_pages.

Table names, id prefixes, and environment variable names live here so the
backend client, the menu service, and the tests agree on them without
drifting.

Examples
--------
>>> from union_pages import _constants
>>> _constants.PAGE_ID_PREFIX + "42"
'page-42'
"""

GALLERIES_TABLE = "galleries"
GALLERY_IMAGES_TABLE = "gallery_images"
DOWNLOADS_TABLE = "downloads"
EBOOKS_TABLE = "ebooks"
STATIC_PAGES_TABLE = "static_pages"
CATEGORIES_TABLE = "categories"
MENU_ITEMS_TABLE = "menu_items"
MENU_POSITIONS_TABLE = "menu_positions"

PAGE_ID_PREFIX = "page-"
CATEGORY_ID_PREFIX = "category-"
CUSTOM_ID_PREFIX = "custom-"

API_KEY_ENV = "UNION_PAGES_API_KEY"
MAP_TOKEN_ENV = "UNION_PAGES_MAP_TOKEN"
