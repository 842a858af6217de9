from .page_editor_controller import PageEditorController

__all__ = ["PageEditorController"]
