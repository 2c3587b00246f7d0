"""
holds submodules related to deriving structural variant evidence from split reads
"""
__version__ = '0.1.0'
