"""
Contact Rename Stage

Loads the contact index and renames export files after the matching contacts.
"""

import logging
import time
from typing import Callable, Optional

import config
from core.contact_index import ContactIndex
from core.contact_store import AuthorizationError, ContactStore, create_contact_store
from core.export_files import ExportDirectoryError
from core.file_renamer import FileRenamer, RenameSummary

from ..base import PipelineContext, PipelineStage, StageResult

logger = logging.getLogger(__name__)


class ContactRenameStage(PipelineStage):
    """
    Renames export files from raw handles to contact names.

    Args:
        store_factory: Builds the contact store for a run; defaults to
            create_contact_store(contacts_file)
    """

    def __init__(self, store_factory: Optional[Callable[..., ContactStore]] = None):
        super().__init__("contact_rename")
        self.store_factory = store_factory or create_contact_store

    def get_dependencies(self):
        return ["export"]

    def load_contact_index(self, context: PipelineContext) -> ContactIndex:
        """
        Build the contact index.

        A store that denies access or fails while being read yields an empty
        index, so the run continues with files keeping their names.
        """
        store = self.store_factory(getattr(context.config, "contacts_file", None))
        try:
            contact_index = ContactIndex.from_store(store)
        except AuthorizationError as e:
            logger.warning(f"⚠️  {e}")
            logger.warning("⚠️  Skipping file renaming")
            return ContactIndex.empty()
        except OSError as e:
            logger.warning(f"⚠️  Failed to load contacts: {e}")
            logger.warning("⚠️  Skipping file renaming")
            return ContactIndex.empty()

        if getattr(context.config, "is_verbose", False):
            for identifier, name in contact_index.sample(config.CONTACT_SAMPLE_SIZE):
                logger.info(f"  Sample contact: {identifier} -> {name}")
        return contact_index

    def execute(self, context: PipelineContext) -> StageResult:
        start_time = time.time()
        contact_index = self.load_contact_index(context)

        if not contact_index:
            logger.info("No contacts available, files keep their names")
            return StageResult(
                success=True,
                execution_time=time.time() - start_time,
                records_processed=0,
                metadata={"summary": RenameSummary(), "contacts_loaded": 0},
            )

        renamer = FileRenamer(contact_index, dry_run=context.dry_run)
        try:
            summary = renamer.rename_directory(context.export_dir)
        except ExportDirectoryError as e:
            logger.error(f"❌ {e}")
            return StageResult(
                success=True,
                execution_time=time.time() - start_time,
                records_processed=0,
                errors=[str(e)],
                metadata={
                    "summary": RenameSummary(),
                    "contacts_loaded": contact_index.stats.contacts_seen,
                    "directory_missing": True,
                },
            )

        return StageResult(
            success=True,
            execution_time=time.time() - start_time,
            records_processed=summary.files_processed,
            errors=list(summary.errors),
            metadata={"summary": summary, "contacts_loaded": contact_index.stats.contacts_seen},
        )
