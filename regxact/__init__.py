"""Register map model with readers for IP-XACT and register-documentation XHTML."""

__version__ = "0.1.0"