"""Brand asset library and cascading deletion."""

from collections import defaultdict, deque
from typing import Iterable

from loguru import logger

from brandforge_editor.core.exceptions import StorageError
from brandforge_editor.models.asset import AssetType, Brand, BrandAsset
from brandforge_editor.services.storage import BlobStore


def build_children_index(assets: Iterable[BrandAsset]) -> dict[str, list[str]]:
    """Map each parent id to the ids of assets derived from it."""
    children: dict[str, list[str]] = defaultdict(list)
    for asset in assets:
        if asset.parent_id is not None:
            children[asset.parent_id].append(asset.id)
    return children


def cascade_delete(root_id: str, assets: Iterable[BrandAsset]) -> list[str]:
    """
    Collect an asset and everything transitively derived from it.

    Breadth-first over ``parent_id`` links; the visited set keeps the walk
    finite even if the links form a cycle.

    Args:
        root_id: Asset to delete
        assets: The whole asset collection

    Returns:
        Ids to delete, root first, in breadth-first order
    """
    children = build_children_index(assets)

    ordered = [root_id]
    visited = {root_id}
    queue = deque([root_id])
    while queue:
        current = queue.popleft()
        for child_id in children.get(current, ()):
            if child_id not in visited:
                visited.add(child_id)
                ordered.append(child_id)
                queue.append(child_id)

    return ordered


class AssetLibrary:
    """A brand's asset metadata plus the blobs behind it."""

    def __init__(self, brand: Brand, blob_store: BlobStore):
        self.brand = brand
        self.blob_store = blob_store

    def add(self, asset: BrandAsset) -> BrandAsset:
        self.brand.assets.append(asset)
        return asset

    def get(self, asset_id: str) -> BrandAsset | None:
        for asset in self.brand.assets:
            if asset.id == asset_id:
                return asset
        return None

    def video_assets(self) -> list[BrandAsset]:
        return [asset for asset in self.brand.assets if asset.type == AssetType.VIDEO_AD]

    async def delete(self, root_id: str) -> list[str]:
        """
        Delete an asset with all its dependents.

        Metadata is removed first, blobs second. If blob deletion fails the
        metadata stays removed and the remaining blobs are orphaned.

        Args:
            root_id: Asset to delete

        Returns:
            Deleted ids

        Raises:
            StorageError: Blob deletion failed partway
        """
        ids = cascade_delete(root_id, self.brand.assets)
        doomed = set(ids)
        self.brand.assets = [asset for asset in self.brand.assets if asset.id not in doomed]
        logger.info(f"Removed {len(ids)} asset(s) from brand {self.brand.name}")

        try:
            await self.blob_store.delete_many(ids)
        except StorageError as e:
            logger.warning(f"Blob deletion failed, orphaned blobs may remain for {ids}: {e}")
            raise
        except OSError as e:
            logger.warning(f"Blob deletion failed, orphaned blobs may remain for {ids}: {e}")
            raise StorageError(f"Failed to delete blobs: {e}") from e

        return ids
