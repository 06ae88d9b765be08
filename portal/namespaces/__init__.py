"""Namespace services: drift reconciliation, provisioning, serialization and export."""

from .declarations import AppNamespaceService
from .events import (
	AppNamespaceEvent,
	AppNamespaceEventListener,
	AppNamespaceEventPublisher,
	AppNamespaceEventType,
	events_log_listener,
)
from .export import NamespaceExporter, exporter_build_archive_file_name, exporter_stream_archive
from .interfaces import (
	ExportEntry,
	ExportFailure,
	ExportPlan,
	ExportReport,
	NamespaceBatchResult,
	NamespaceCreationFailure,
	NamespaceCreationRequest,
	NamespaceView,
	ProvisioningFailure,
	ProvisioningResult,
)
from .permissions import PermissionValidatorPort, SettingsPermissionValidator
from .provisioner import NamespaceProvisioner
from .queries import NamespaceQueryService
from .reconciler import NamespaceReconciler, reconciler_missing_namespace_names
from .serializer import (
	serializer_derive_file_name,
	serializer_parse,
	serializer_render,
	serializer_resolve_format,
)

__all__ = [
	"AppNamespaceEvent",
	"AppNamespaceEventListener",
	"AppNamespaceEventPublisher",
	"AppNamespaceEventType",
	"AppNamespaceService",
	"ExportEntry",
	"ExportFailure",
	"ExportPlan",
	"ExportReport",
	"NamespaceBatchResult",
	"NamespaceCreationFailure",
	"NamespaceCreationRequest",
	"NamespaceExporter",
	"NamespaceProvisioner",
	"NamespaceQueryService",
	"NamespaceReconciler",
	"NamespaceView",
	"PermissionValidatorPort",
	"ProvisioningFailure",
	"ProvisioningResult",
	"SettingsPermissionValidator",
	"events_log_listener",
	"exporter_build_archive_file_name",
	"exporter_stream_archive",
	"reconciler_missing_namespace_names",
	"serializer_derive_file_name",
	"serializer_parse",
	"serializer_render",
	"serializer_resolve_format",
]
