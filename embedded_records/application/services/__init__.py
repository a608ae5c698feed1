from .record_codec import RecordCodec, build_default_effect
from .permission_delegate import ContainerPermissionDelegate, delegate_permissions
from .materializer import Materializer
from .write_queue import ContainerWriteQueue
from .synchronizer import Mutation, Synchronizer
from .embedded_record_editor import EditorSessionRegistry, EmbeddedRecordEditor, default_locator
from .embedded_record_manager import EmbeddedRecordManager
from .group_manager import GroupManager
from .container_service import ContainerService
from .sse_manager import SSEManager
from .sse_render_notifier import SSERenderNotifier

__all__ = [
    "RecordCodec",
    "build_default_effect",
    "ContainerPermissionDelegate",
    "delegate_permissions",
    "Materializer",
    "ContainerWriteQueue",
    "Mutation",
    "Synchronizer",
    "EditorSessionRegistry",
    "EmbeddedRecordEditor",
    "default_locator",
    "EmbeddedRecordManager",
    "GroupManager",
    "ContainerService",
    "SSEManager",
    "SSERenderNotifier",
]
