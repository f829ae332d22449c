"""Per-node structure depiction with isolated failures."""

from __future__ import annotations

from dataclasses import dataclass
import io
import logging
from pathlib import Path
import shutil
import tempfile
from typing import Any, Optional, Protocol

from PIL import Image

from scaffold_graph.errors import ConfigError, DepictionError, DepictionWarning

try:  # Optional dependency.
    from rdkit import Chem
    from rdkit.Chem import AllChem
    from rdkit.Chem.Draw import rdMolDraw2D
except ImportError:  # pragma: no cover - optional dependency
    Chem = None
    AllChem = None
    rdMolDraw2D = None

logger = logging.getLogger(__name__)

IMAGE_FILE_PREFIX = "ScaffoldGraph"


class Depictor(Protocol):
    def render(self, structure: Any, width: int, height: int) -> Image.Image:
        ...


class RDKitDepictor:
    """Render RDKit molecules (or SMILES strings) to PIL images via Cairo."""

    def __init__(self, *, fill_to_fit: bool = True, add_stereo_annotation: bool = False) -> None:
        if Chem is None or rdMolDraw2D is None:
            raise ConfigError("rdkit is required to depict scaffold structures.")
        self.fill_to_fit = fill_to_fit
        self.add_stereo_annotation = add_stereo_annotation

    def _to_mol(self, structure: Any) -> Any:
        if isinstance(structure, Chem.Mol):
            return Chem.Mol(structure)
        if isinstance(structure, str):
            mol = Chem.MolFromSmiles(structure)
            if mol is None:
                raise DepictionError(f"Invalid SMILES: {structure}")
            return mol
        raise DepictionError(
            f"Unsupported structure handle: {type(structure).__name__}"
        )

    def render(self, structure: Any, width: int, height: int) -> Image.Image:
        mol = self._to_mol(structure)
        try:
            if mol.GetNumConformers() == 0:
                AllChem.Compute2DCoords(mol)
            drawer = rdMolDraw2D.MolDraw2DCairo(int(width), int(height))
            options = drawer.drawOptions()
            options.addStereoAnnotation = self.add_stereo_annotation
            if self.fill_to_fit:
                options.padding = 0.05
            drawer.DrawMolecule(mol)
            drawer.FinishDrawing()
            image = Image.open(io.BytesIO(drawer.GetDrawingText()))
            image.load()
        except (RuntimeError, ValueError, OSError) as exc:
            raise DepictionError(f"Structure drawing failed: {exc}") from exc
        return image


@dataclass(frozen=True)
class DepictionResult:
    """Either an image or the depiction error that prevented it."""

    image: Optional[Image.Image] = None
    error: Optional[DepictionError] = None

    @property
    def ok(self) -> bool:
        return self.image is not None and self.error is None

    @classmethod
    def success(cls, image: Image.Image) -> "DepictionResult":
        return cls(image=image)

    @classmethod
    def failure(cls, error: DepictionError) -> "DepictionResult":
        return cls(error=error)

    def warning(self, index: int) -> Optional[DepictionWarning]:
        if self.error is None:
            return None
        return DepictionWarning(index=index, message=str(self.error))


def resolve_depiction(
    depictor: Depictor,
    structure: Any,
    index: int,
    size: tuple[int, int],
) -> DepictionResult:
    width, height = size
    try:
        image = depictor.render(structure, width, height)
    except DepictionError as exc:
        logger.warning(
            "Unable to depict structure at index %d. Displaying empty node. (%s)",
            index,
            exc,
        )
        return DepictionResult.failure(exc)
    if not isinstance(image, Image.Image):
        error = DepictionError(
            f"Depictor returned {type(image).__name__}, expected a PIL image."
        )
        logger.warning(
            "Unable to depict structure at index %d. Displaying empty node. (%s)",
            index,
            error,
        )
        return DepictionResult.failure(error)
    return DepictionResult.success(image)


class ImageScope:
    """Temporary PNG files of one assembled graph.

    Each scope owns a fresh directory below ``base_dir``; :meth:`release`
    removes it. The files only feed drawing and export, the in-memory
    images stay attached to the graph.
    """

    def __init__(self, base_dir: Path, *, prefix: str = "graph-") -> None:
        self.base_dir = Path(base_dir)
        self.prefix = prefix
        self._directory: Optional[Path] = None
        self._released = False
        self.paths: list[Path] = []

    @property
    def directory(self) -> Optional[Path]:
        return self._directory

    @property
    def released(self) -> bool:
        return self._released

    def _ensure_directory(self) -> Path:
        if self._released:
            raise ConfigError("Image scope has already been released.")
        if self._directory is None:
            self._directory = Path(
                tempfile.mkdtemp(prefix=self.prefix, dir=str(self.base_dir))
            )
        return self._directory

    def write(self, index: int, image: Image.Image) -> Path:
        directory = self._ensure_directory()
        path = directory / f"{IMAGE_FILE_PREFIX}{index}.png"
        image.save(path, format="PNG")
        self.paths.append(path)
        return path

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._directory is not None:
            shutil.rmtree(self._directory, ignore_errors=True)
            logger.debug("Released temporary images in %s", self._directory)

    def __enter__(self) -> "ImageScope":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()


__all__ = [
    "Depictor",
    "RDKitDepictor",
    "DepictionResult",
    "resolve_depiction",
    "ImageScope",
]
