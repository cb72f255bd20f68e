"""
Image upload pipeline.

Uploads arrive as base64 payloads, raster images are re-encoded as WebP
under a size budget and stored through Django's default storage.
Files uploaded before their product exists live under staging/ and are
moved next to the product once it is saved.

Storage layout:
    brands/<name>.<ext>
    country-flags/<name>.<ext>
    <folder>/<category-slug>/<product-name>/<name>.<ext>
    <folder>/<slug>/<name>.<ext>
    <folder>/temp-<timestamp>/<name>.<ext>
"""

import base64
import binascii
import io
import json
import logging
import posixpath
import re
import time

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from imagekit.processors import ResizeToFit
from PIL import Image, ImageOps, UnidentifiedImageError

from apps.catalog.exceptions import ImageStorageError, ImageUploadError

logger = logging.getLogger(__name__)

ALLOWED_TYPES = [
    'image/jpeg',
    'image/jpg',
    'image/png',
    'image/webp',
    'image/svg+xml',
]

# Folders stored flat, without per-entity subdirectories
FLAT_FOLDERS = ('brands', 'country-flags')
STAGING_FOLDER = 'staging'

# WebP input at or below this size is stored untouched
WEBP_PASSTHROUGH_BYTES = int(1.4 * 1024 * 1024)

_UNSAFE_CHARS = re.compile(r'[^a-z0-9.-]')
_DASHES = re.compile(r'-+')


def _now_ms():
    return int(time.time() * 1000)


def sanitize_filename(name):
    """'Фото Пола 1.JPG' -> '1.jpg'; unsafe characters become dashes."""
    name = _UNSAFE_CHARS.sub('-', (name or '').lower())
    name = _DASHES.sub('-', name)
    return name.strip('-')


def image_url(path):
    """Public URL of a storage path."""
    if not path:
        return None
    return f"{settings.ASSETS_BASE_URL.rstrip('/')}/{path}"


def is_staging_path(path):
    return bool(path) and path.startswith(f'{STAGING_FOLDER}/')


def build_directory(folder, slug=None, category_slug=None, product_name=None):
    """Directory an upload goes to, see the module docstring for the layout."""
    if folder in FLAT_FOLDERS:
        return folder
    if category_slug and product_name and category_slug.strip() and product_name.strip():
        return f"{folder}/{sanitize_filename(category_slug)}/{sanitize_filename(product_name)}"
    slug = sanitize_filename(slug).strip('.-')
    if slug:
        return f"{folder}/{slug}"
    return f"{folder}/temp-{_now_ms()}"


def split_name(file_name, is_svg=False):
    """Return (stem, extension) of a sanitized file name."""
    sanitized = sanitize_filename(file_name)
    extension = sanitized.rsplit('.', 1)[-1] if '.' in sanitized else 'jpg'
    if is_svg:
        extension = 'svg'

    dot = sanitized.rfind('.')
    stem = sanitized[:dot] if dot > 0 else sanitized
    if not stem or not stem.replace('.', '').replace('-', ''):
        stem = f"image-{_now_ms()}"
    return stem, extension


def available_path(directory, stem, extension, storage=None):
    """First free path among name.ext, name-copy.ext, name-copy2.ext, ..."""
    storage = storage or default_storage
    path = f"{directory}/{stem}.{extension}"
    copy_number = 0
    while storage.exists(path):
        copy_number += 1
        suffix = '-copy' if copy_number == 1 else f'-copy{copy_number}'
        path = f"{directory}/{stem}{suffix}.{extension}"
    return path


def decode_payload(file_data):
    """Decode a base64 payload, with or without a data-URL prefix."""
    if not file_data:
        raise ImageUploadError('No file provided')
    if ',' in file_data and file_data.startswith('data:'):
        file_data = file_data.split(',', 1)[1]
    try:
        return base64.b64decode(file_data, validate=False)
    except (binascii.Error, ValueError):
        raise ImageUploadError('File data is not valid base64')


def _prepare_for_webp(image):
    image = ImageOps.exif_transpose(image)
    if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
        return image.convert('RGBA')
    if image.mode != 'RGB':
        return image.convert('RGB')
    return image


def compress_image(data, content_type='', target_bytes=None, max_dimension=None):
    """
    Re-encode a raster image as WebP under a size budget.

    WebP input already under 1.4 MB is kept as is. Otherwise the image is
    fitted into max_dimension and encoded at quality 85, lowering quality by
    5 while the result is over target_bytes and quality stays above 40.
    Input Pillow cannot decode is returned unchanged; images over Pillow's
    decompression bomb limit raise ImageUploadError.

    Returns:
        (bytes, content_type, converted)
    """
    target_bytes = target_bytes or settings.STORE_IMAGE_TARGET_BYTES
    max_dimension = max_dimension or settings.STORE_IMAGE_MAX_DIMENSION

    if content_type == 'image/webp' and len(data) <= WEBP_PASSTHROUGH_BYTES:
        return data, content_type, False

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        image = _prepare_for_webp(image)
        if image.width > max_dimension or image.height > max_dimension:
            image = ResizeToFit(max_dimension, max_dimension, upscale=False).process(image)

        quality = 85
        encoded = _encode_webp(image, quality)
        while len(encoded) > target_bytes and quality > 40:
            quality -= 5
            encoded = _encode_webp(image, quality)
    except Image.DecompressionBombError as exc:
        logger.warning("Rejected oversized image: %s", exc)
        raise ImageUploadError('Image dimensions are too large')
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.warning("Image compression failed, keeping original: %s", exc)
        return data, content_type, False

    logger.debug(
        "Compressed image %d -> %d bytes at quality %d", len(data), len(encoded), quality
    )
    return encoded, 'image/webp', True


def _encode_webp(image, quality):
    buffer = io.BytesIO()
    image.save(buffer, format='WEBP', quality=quality)
    return buffer.getvalue()


def upload_image(
    file_data,
    file_name,
    file_type,
    file_size=None,
    folder='products',
    slug=None,
    category_slug=None,
    product_name=None,
):
    """
    Validate, compress and store an uploaded image.

    Size limits apply to the bytes actually stored: 1.5 MB for raster
    images after compression, 5 MB for SVG.

    Returns:
        {'success': True, 'filename': <storage path>, 'url': <public url>}
    """
    file_name = file_name or ''
    file_type = (file_type or '').lower()
    is_svg = file_type == 'image/svg+xml' or file_name.lower().endswith('.svg')

    if file_type not in ALLOWED_TYPES and not is_svg:
        raise ImageUploadError(
            'Invalid file type. Only JPEG, PNG, WebP, and SVG images are allowed.'
        )

    data = decode_payload(file_data)

    content_type = 'image/svg+xml' if is_svg else file_type
    stem, extension = split_name(file_name, is_svg=is_svg)
    if not is_svg:
        data, content_type, converted = compress_image(data, content_type)
        if converted:
            extension = 'webp'

    max_size = settings.STORE_SVG_MAX_UPLOAD_BYTES if is_svg else settings.STORE_IMAGE_MAX_UPLOAD_BYTES
    if len(data) > max_size:
        raise ImageUploadError(
            'SVG file size must be less than 5MB' if is_svg
            else 'File size must be less than 1.5MB'
        )

    directory = build_directory(folder or 'products', slug, category_slug, product_name)
    try:
        path = available_path(directory, stem, extension)
        saved = default_storage.save(path, ContentFile(data))
    except OSError as exc:
        logger.error("Failed to store image %s: %s", file_name, exc)
        raise ImageStorageError('Failed to upload image')

    logger.info(
        "Uploaded image %s (%s bytes declared, %d stored)", saved, file_size, len(data)
    )
    return {'success': True, 'filename': saved, 'url': image_url(saved)}


def parse_image_list(images):
    """Accept a list, a JSON array string or a comma-separated string."""
    if not images:
        return []
    if isinstance(images, (list, tuple)):
        return [str(image).strip() for image in images if str(image).strip()]
    try:
        parsed = json.loads(images)
    except ValueError:
        parsed = None
    if isinstance(parsed, list):
        return [str(image).strip() for image in parsed if str(image).strip()]
    return [image.strip() for image in str(images).split(',') if image.strip()]


def delete_image(filename, current_images=None):
    """
    Delete a stored image unless it is still referenced.

    A file that is already gone counts as deleted.
    """
    if not filename:
        raise ImageUploadError('No filename provided')

    if filename.strip() in parse_image_list(current_images):
        logger.info("Skipping deletion of %s, still referenced", filename)
        return {
            'success': True,
            'skipped': True,
            'message': 'Image not deleted - still referenced',
        }

    try:
        if not default_storage.exists(filename):
            logger.warning("Image not found in storage: %s", filename)
            return {'success': True, 'message': 'File not found (may have been already deleted)'}
        default_storage.delete(filename)
    except OSError as exc:
        logger.error("Failed to delete image %s: %s", filename, exc)
        raise ImageStorageError('Failed to delete image')

    logger.info("Deleted image %s", filename)
    return {'success': True, 'message': 'Image deleted successfully'}


def move_image(source, destination, storage=None):
    """Copy source to destination and remove source. Returns the stored name."""
    storage = storage or default_storage
    with storage.open(source, 'rb') as handle:
        content = handle.read()
    saved = storage.save(destination, ContentFile(content))
    storage.delete(source)
    return saved


def promote_staging_images(
    paths,
    final_folder='products',
    slug=None,
    category_slug=None,
    product_name=None,
):
    """
    Move staging/ images to their final directory.

    Non-staging paths pass through. A file that fails to move keeps its
    staging path and is reported in 'failed' so the save can go on.

    Returns:
        {'path_map': {old: new}, 'failed': [old, ...]}
    """
    path_map = {}
    failed = []
    staging = [path for path in parse_image_list(paths) if is_staging_path(path)]
    if not staging:
        return {'path_map': path_map, 'failed': failed}

    directory = build_directory(final_folder, slug, category_slug, product_name)
    for path in staging:
        base = posixpath.basename(path)
        stem, extension = split_name(base, is_svg=base.lower().endswith('.svg'))
        try:
            destination = available_path(directory, stem, extension)
            path_map[path] = move_image(path, destination)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to move staging image %s: %s", path, exc)
            failed.append(path)

    logger.info("Promoted %d staging images to %s", len(path_map), directory)
    return {'path_map': path_map, 'failed': failed}


def apply_path_map(paths, path_map):
    return [path_map.get(path, path) for path in parse_image_list(paths)]


def cleanup_images(paths):
    """Best-effort removal of stored images. Returns how many were deleted."""
    deleted = 0
    for path in parse_image_list(paths):
        try:
            if default_storage.exists(path):
                default_storage.delete(path)
                deleted += 1
        except OSError as exc:
            logger.warning("Failed to clean up image %s: %s", path, exc)
    return deleted
