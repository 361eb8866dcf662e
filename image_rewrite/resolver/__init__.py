from .binding_resolver import BindingResolver, ResolvedExport
from .component import classify, is_tracked_module
