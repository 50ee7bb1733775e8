"""Shortcode resolution and rendering for author-produced rich text.

News articles and static pages embed galleries, downloadable files, ebooks
and social-media posts with markers such as ``[gallery id="..."]``. This
subpackage tokenises such content, looks the referenced entities up through
the hosted backend, and renders the resulting fragments to HTML.

Examples
--------
>>> from union_pages.content import tokenize
>>> [token.reference.kind.value for token in tokenize('[ebook id="e1"]')]
['ebook']
"""

from .models import (
    DownloadFile,
    Ebook,
    Entity,
    EntityLookup,
    Fragment,
    FragmentState,
    Gallery,
    GalleryImage,
    LiteralToken,
    ShortcodeKind,
    ShortcodeReference,
    ShortcodeToken,
    SocialEmbed,
)
from .renderer import FragmentRenderer, harden_iframes
from .repository import EntityRepository
from .resolver import SUPPORTED_PLATFORMS, ResolutionSession, ShortcodeResolver
from .tokenizer import (
    build_preview,
    build_shortcode,
    build_social_embed,
    strip_shortcodes,
    tokenize,
)

__all__ = [
    "SUPPORTED_PLATFORMS",
    "DownloadFile",
    "Ebook",
    "Entity",
    "EntityLookup",
    "EntityRepository",
    "Fragment",
    "FragmentRenderer",
    "FragmentState",
    "Gallery",
    "GalleryImage",
    "LiteralToken",
    "ResolutionSession",
    "ShortcodeKind",
    "ShortcodeReference",
    "ShortcodeResolver",
    "ShortcodeToken",
    "SocialEmbed",
    "build_preview",
    "build_shortcode",
    "build_social_embed",
    "harden_iframes",
    "strip_shortcodes",
    "tokenize",
]
