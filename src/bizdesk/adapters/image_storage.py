"""
bizdesk/adapters/image_storage.py — Клиент хранилища изображений.

Если задан ``IMAGE_STORAGE_URL`` — изображения уходят во внешний
HTTP-сервис (``POST /images``, ``DELETE /images/{reference}``).
Иначе файлы пишутся в локальную папку ``MEDIA_ROOT`` (разработка, тесты).
Изображения по умолчанию никогда не удаляются.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from urllib.parse import quote
from uuid import uuid4

import aiofiles
import aiofiles.os
import httpx
from fastapi import UploadFile

from bizdesk.config import get_settings
from bizdesk.exceptions import BadRequestError

logger = logging.getLogger(__name__)


def _client() -> httpx.AsyncClient:
    settings = get_settings()
    headers = {}
    if settings.image_storage_api_key:
        headers["Authorization"] = f"Bearer {settings.image_storage_api_key}"
    return httpx.AsyncClient(base_url=settings.image_storage_url, headers=headers, timeout=30.0)


def _local_path(reference: str) -> Path:
    root = Path(get_settings().media_root).resolve()
    path = (root / reference).resolve()
    if root not in path.parents:
        raise BadRequestError(f"Invalid image reference: {reference}")
    return path


async def handle_single_image(file: UploadFile) -> str:
    """Сохраняет загруженное изображение и возвращает его reference."""
    if file.content_type and not file.content_type.startswith("image/"):
        raise BadRequestError("Please upload an image")
    limit = get_settings().max_image_size
    content = await file.read(limit + 1)
    if not content:
        raise BadRequestError("Uploaded image is empty")
    if len(content) > limit:
        raise BadRequestError(
            f"Image is too large. Maximum size: {limit // 1024} KB",
            details={"maxSize": limit},
        )

    name = f"{uuid4().hex}{Path(file.filename or '').suffix.lower()}"

    if get_settings().image_storage_url:
        async with _client() as client:
            resp = await client.post(
                "/images", files={"image": (name, content, file.content_type or "image/*")}
            )
            resp.raise_for_status()
            reference = resp.json()["reference"]
    else:
        reference = f"uploads/{name}"
        path = _local_path(reference)
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

    logger.info("Image stored: %s", reference)
    return reference


async def delete_images(references: list[str]) -> None:
    """Удаляет изображения; ссылки по умолчанию и пустые пропускаются."""
    settings = get_settings()
    defaults = {settings.default_profile_image, settings.default_company_logo}
    doomed = [r for r in references if r and r not in defaults]
    if not doomed:
        return

    if settings.image_storage_url:
        async with _client() as client:
            responses = await asyncio.gather(
                *(client.delete(f"/images/{quote(ref, safe='')}") for ref in doomed)
            )
        for resp in responses:
            if resp.status_code != 404:
                resp.raise_for_status()
    else:
        for ref in doomed:
            path = _local_path(ref)
            if await aiofiles.os.path.exists(path):
                await aiofiles.os.remove(path)

    logger.info("Images deleted: %s", ", ".join(doomed))
