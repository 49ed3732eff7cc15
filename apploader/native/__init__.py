"""Native executable hosting for loader modules."""

from apploader.native.process import ProcessModule, create_process_module_factory

__all__ = ["ProcessModule", "create_process_module_factory"]
