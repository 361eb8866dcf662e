from .exports import ExportTable, collect_exports
from .module_loader import ModuleLoader, ParsedModule, is_relative_specifier
