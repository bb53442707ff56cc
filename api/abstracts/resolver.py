"""
Locate the uploaded file for an abstract.

Stored file paths are not reliable, so resolution falls through three tiers:

1. direct path: the record's file_path under the uploads dir
2. naming convention: scan the per-submission folders for a folder or
   file that correlates with the abstract, then for uncorrelated single
   candidates
3. extension fallback: the first document found in any folder

Directories are always enumerated in name order so the same tree
resolves the same way on every request.
"""

import re
from pathlib import Path

from api.abstracts.errors import AbstractFileNotFound
from api.abstracts.models import Abstract, Confidence, ResolutionTier, ResolvedFile
from core.config import Settings
from core.logger import logger

DOCUMENT_EXTENSIONS = (".pdf", ".doc", ".docx", ".txt")
SUBMISSION_FOLDER_PREFIX = "sub_"


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True


def _list_folders(root: Path) -> list[Path]:
    """Immediate subdirectories of root, sorted by name"""
    return sorted((item for item in root.iterdir() if item.is_dir()), key=lambda p: p.name)


def _list_files(folder: Path) -> list[Path] | None:
    """Regular files in folder, or None when the folder can't be read"""
    try:
        return sorted((item for item in folder.iterdir() if item.is_file()), key=lambda p: p.name)
    except OSError as exc:
        logger.warning("Skipping unreadable upload folder %s: %s", folder, exc)
        return None


def _folder_correlates(folder_name: str, abstract: Abstract) -> bool:
    if re.search(rf"abstract_{abstract.id}(?!\d)", folder_name):
        return True
    return bool(abstract.abstract_number) and abstract.abstract_number in folder_name


def _file_correlates(file_name: str, abstract: Abstract) -> bool:
    return re.search(rf"(?<!\d){abstract.id}_", file_name) is not None


def _preferred_file(files: list[Path], abstract: Abstract) -> Path:
    """Pick the best file from a folder already accepted for the abstract"""
    for file in files:
        if abstract.file_name and file.name == abstract.file_name:
            return file
    for file in files:
        if _file_correlates(file.name, abstract):
            return file
    return files[0]


def _resolved(
    abstract: Abstract,
    path: Path,
    tier: ResolutionTier,
    confidence: Confidence,
    reason: str,
) -> ResolvedFile:
    return ResolvedFile(
        path=path.resolve(),
        display_name=abstract.file_name or path.name,
        tier=tier,
        confidence=confidence,
        reason=reason,
    )


def resolve_direct_path(abstract: Abstract, settings: Settings) -> ResolvedFile | None:
    """Tier 1: trust the stored file_path when it still points at a file"""
    if not (abstract.file_path and abstract.file_name):
        return None

    relative = abstract.file_path.lstrip("/\\")
    candidates = [settings.UPLOADS_DIR / relative]
    if abstract.file_path.startswith(("/", "\\")):
        # Stored as a public URL path, e.g. /uploads/abstracts/x/file.pdf
        candidates.append(settings.PUBLIC_DIR / relative)

    for candidate in candidates:
        if not _is_within(candidate, settings.PUBLIC_DIR):
            logger.warning(
                "Ignoring file_path %r of abstract %s, it escapes the public dir",
                abstract.file_path, abstract.id,
            )
            continue
        logger.debug("Trying stored path %s", candidate)
        if candidate.is_file():
            return ResolvedFile(
                path=candidate.resolve(),
                display_name=abstract.file_name,
                tier=ResolutionTier.DIRECT_PATH,
                confidence=Confidence.HIGH,
                reason="stored file_path",
            )
    return None


def resolve_by_naming_convention(
    abstract: Abstract, folders: list[tuple[Path, list[Path]]]
) -> ResolvedFile | None:
    """Tier 2: match submission folders and files against the abstract"""
    # Correlated matches win over uncorrelated ones wherever they are
    for folder, files in folders:
        if not files:
            continue
        if _folder_correlates(folder.name, abstract):
            return _resolved(
                abstract, _preferred_file(files, abstract),
                ResolutionTier.NAMING_CONVENTION, Confidence.HIGH,
                f"folder {folder.name} matches abstract",
            )
        for file in files:
            if _file_correlates(file.name, abstract):
                return _resolved(
                    abstract, file,
                    ResolutionTier.NAMING_CONVENTION, Confidence.HIGH,
                    f"file name {file.name} matches abstract id",
                )

    for folder, files in folders:
        if folder.name.startswith(SUBMISSION_FOLDER_PREFIX) and files:
            return _resolved(
                abstract, _preferred_file(files, abstract),
                ResolutionTier.NAMING_CONVENTION, Confidence.MEDIUM,
                f"submission folder {folder.name}",
            )
        if len(files) == 1:
            return _resolved(
                abstract, files[0],
                ResolutionTier.NAMING_CONVENTION, Confidence.MEDIUM,
                f"only file in folder {folder.name}",
            )
    return None


def resolve_by_extension(
    abstract: Abstract, folders: list[tuple[Path, list[Path]]]
) -> ResolvedFile | None:
    """Tier 3: any document at all, the weakest guess"""
    for folder, files in folders:
        documents = [f for f in files if f.suffix.lower() in DOCUMENT_EXTENSIONS]
        if documents:
            return _resolved(
                abstract, documents[0],
                ResolutionTier.EXTENSION_FALLBACK, Confidence.LOW,
                f"first document in folder {folder.name}",
            )
    return None


def list_available_files(settings: Settings) -> list[str]:
    """Every file under the abstract uploads dir, as <folder>/<file>"""
    root = settings.ABSTRACT_UPLOADS_DIR
    if not root.is_dir():
        return []
    listing = [item.name for item in root.iterdir() if item.is_file()]
    for folder in _list_folders(root):
        files = _list_files(folder) or []
        listing.extend(f"{folder.name}/{file.name}" for file in files)
    return sorted(listing)


def resolve_abstract_file(abstract: Abstract, settings: Settings) -> ResolvedFile:
    """
    Find the file for an abstract.

    Raises:
        AbstractFileNotFound: when no tier locates a file
    """
    resolved = resolve_direct_path(abstract, settings)

    uploads_root = settings.ABSTRACT_UPLOADS_DIR
    upload_folder_exists = uploads_root.is_dir()

    if resolved is None and upload_folder_exists:
        logger.info(
            "Stored file info missing or stale for abstract %s, searching %s",
            abstract.id, uploads_root,
        )
        folders = []
        for folder in _list_folders(uploads_root):
            files = _list_files(folder)
            if files is not None:
                folders.append((folder, files))
        logger.debug("Searching %d upload folders", len(folders))

        resolved = resolve_by_naming_convention(abstract, folders)
        if resolved is None and settings.ABSTRACT_EXTENSION_FALLBACK:
            resolved = resolve_by_extension(abstract, folders)

    if resolved is None:
        available_files = None
        if settings.ABSTRACT_LIST_AVAILABLE_FILES:
            available_files = list_available_files(settings)
        raise AbstractFileNotFound(
            abstract,
            upload_folder_exists=upload_folder_exists,
            available_files=available_files,
        )

    if resolved.confidence == Confidence.LOW:
        logger.warning(
            "Abstract %s resolved to %s by %s, the file may belong to another abstract",
            abstract.id, resolved.path, resolved.reason,
        )
    else:
        logger.info(
            "Abstract %s resolved to %s (%s: %s)",
            abstract.id, resolved.path, resolved.tier.value, resolved.reason,
        )
    return resolved
