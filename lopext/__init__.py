"""
lopext - Limit Order Protocol Extensions

Core imports are lazily loaded so that importing a calculator does not pull
in the RPC client. For direct module access, import from submodules:

    from lopext.builder import OrderBuilder
    from lopext.extensions import get_wrapper
    from lopext.calculators import dutch_auction
"""

__version__ = "0.1.0"


# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name in ('OrderBuilder', 'SignedOrder'):
        from . import builder
        return getattr(builder, name)
    elif name in ('get_wrapper', 'available_extensions', 'create_wrapper'):
        from . import extensions
        return getattr(extensions, name)
    elif name in ('MakerTraits', 'MakerTraitFlags', 'MakerTraitSubfields', 'parse_maker_traits'):
        from . import traits
        return getattr(traits, name)
    elif name == 'HookSlot':
        from .hooks import HookSlot
        return HookSlot
    elif name == 'LocalSigner':
        from .crypto.signing import LocalSigner
        return LocalSigner
    elif name == 'RpcClient':
        from .rpc import RpcClient
        return RpcClient
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'lopext' has no attribute {name!r}")


__all__ = [
    'OrderBuilder',
    'SignedOrder',
    'get_wrapper',
    'available_extensions',
    'create_wrapper',
    'MakerTraits',
    'MakerTraitFlags',
    'MakerTraitSubfields',
    'parse_maker_traits',
    'HookSlot',
    'LocalSigner',
    'RpcClient',
    'load_config',
]
