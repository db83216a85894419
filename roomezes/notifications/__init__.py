from .dispatcher import PostCommitHooks, VendorNotifier, format_order_summary

__all__ = ["PostCommitHooks", "VendorNotifier", "format_order_summary"]
