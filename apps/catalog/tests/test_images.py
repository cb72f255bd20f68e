import base64
import io
import shutil
import tempfile
from unittest import mock

from django.core.files.storage import default_storage
from django.test import SimpleTestCase, override_settings
from PIL import Image

from apps.catalog.exceptions import ImageUploadError
from apps.catalog.services import images

SVG = b'<svg xmlns="http://www.w3.org/2000/svg" width="4" height="4"></svg>'


def png_payload(size=(10, 10), color=(200, 120, 40)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format='PNG')
    return base64.b64encode(buffer.getvalue()).decode()


class ImagePathTests(SimpleTestCase):

    def test_sanitize_filename(self):
        self.assertEqual(images.sanitize_filename('Фото Пола 1.JPG'), '1.jpg')
        self.assertEqual(images.sanitize_filename('Oak  Floor (2).png'), 'oak-floor-2-.png')

    def test_build_directory(self):
        self.assertEqual(images.build_directory('brands', slug='tarkett'), 'brands')
        self.assertEqual(
            images.build_directory('products', category_slug='floors', product_name='Oak Parquet'),
            'products/floors/oak-parquet'
        )
        self.assertEqual(images.build_directory('products', slug='oak'), 'products/oak')
        self.assertTrue(images.build_directory('products').startswith('products/temp-'))

    def test_build_directory_sanitizes_slug(self):
        self.assertEqual(images.build_directory('products', slug='../Oak Floor'), 'products/oak-floor')
        self.assertTrue(images.build_directory('products', slug='..').startswith('products/temp-'))

    def test_split_name(self):
        self.assertEqual(images.split_name('Photo.PNG'), ('photo', 'png'))
        self.assertEqual(images.split_name('noext'), ('noext', 'jpg'))
        self.assertEqual(images.split_name('logo.xml', is_svg=True), ('logo', 'svg'))

    def test_parse_image_list(self):
        self.assertEqual(images.parse_image_list(['a.webp', ' ']), ['a.webp'])
        self.assertEqual(images.parse_image_list('["a.webp", "b.webp"]'), ['a.webp', 'b.webp'])
        self.assertEqual(images.parse_image_list('a.webp, b.webp'), ['a.webp', 'b.webp'])
        self.assertEqual(images.parse_image_list(None), [])

    def test_image_url(self):
        self.assertEqual(images.image_url('brands/x.webp'), '/media/brands/x.webp')
        self.assertIsNone(images.image_url(''))

    def test_compress_keeps_undecodable_input(self):
        data, content_type, converted = images.compress_image(b'not an image', 'image/png')
        self.assertEqual((data, content_type, converted), (b'not an image', 'image/png', False))

    def test_compress_converts_to_webp(self):
        data, content_type, converted = images.compress_image(
            base64.b64decode(png_payload((400, 300))), 'image/png', max_dimension=100
        )
        self.assertTrue(converted)
        self.assertEqual(content_type, 'image/webp')
        self.assertEqual(Image.open(io.BytesIO(data)).size, (100, 75))

    def test_compress_rejects_decompression_bomb(self):
        data = base64.b64decode(png_payload((100, 100)))
        with mock.patch.object(Image, 'MAX_IMAGE_PIXELS', 1000):
            with self.assertRaisesMessage(ImageUploadError, 'Image dimensions are too large'):
                images.compress_image(data, 'image/png')


class ImageStorageTests(SimpleTestCase):

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root)
        self.override.enable()

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_upload_raster_is_stored_as_webp(self):
        result = images.upload_image(png_payload(), 'Floor.png', 'image/png', slug='oak')
        self.assertEqual(result['filename'], 'products/oak/floor.webp')
        self.assertEqual(result['url'], '/media/products/oak/floor.webp')
        self.assertTrue(default_storage.exists(result['filename']))

    def test_upload_avoids_overwriting(self):
        images.upload_image(png_payload(), 'Floor.png', 'image/png', slug='oak')
        second = images.upload_image(png_payload(), 'Floor.png', 'image/png', slug='oak')
        third = images.upload_image(png_payload(), 'Floor.png', 'image/png', slug='oak')
        self.assertEqual(second['filename'], 'products/oak/floor-copy.webp')
        self.assertEqual(third['filename'], 'products/oak/floor-copy2.webp')

    def test_upload_accepts_data_url(self):
        payload = 'data:image/png;base64,' + png_payload()
        result = images.upload_image(payload, 'Floor.png', 'image/png', folder='brands')
        self.assertEqual(result['filename'], 'brands/floor.webp')

    def test_upload_svg_is_stored_untouched(self):
        result = images.upload_image(
            base64.b64encode(SVG).decode(), 'Italy.svg', 'image/svg+xml', folder='country-flags'
        )
        self.assertEqual(result['filename'], 'country-flags/italy.svg')
        with default_storage.open(result['filename'], 'rb') as handle:
            self.assertEqual(handle.read(), SVG)

    def test_upload_rejects_type(self):
        with self.assertRaisesMessage(ImageUploadError, 'Invalid file type'):
            images.upload_image(png_payload(), 'anim.gif', 'image/gif')

    def test_upload_requires_data(self):
        with self.assertRaisesMessage(ImageUploadError, 'No file provided'):
            images.upload_image('', 'Floor.png', 'image/png')

    @override_settings(STORE_SVG_MAX_UPLOAD_BYTES=10)
    def test_upload_rejects_large_svg(self):
        with self.assertRaisesMessage(ImageUploadError, 'SVG file size must be less than 5MB'):
            images.upload_image(base64.b64encode(SVG).decode(), 'big.svg', 'image/svg+xml')

    def test_delete_skips_referenced_image(self):
        stored = images.upload_image(png_payload(), 'Floor.png', 'image/png', slug='oak')['filename']
        result = images.delete_image(stored, current_images=[stored, 'other.webp'])
        self.assertTrue(result['skipped'])
        self.assertTrue(default_storage.exists(stored))

    def test_delete_removes_file(self):
        stored = images.upload_image(png_payload(), 'Floor.png', 'image/png', slug='oak')['filename']
        result = images.delete_image(stored, current_images='other.webp')
        self.assertEqual(result['message'], 'Image deleted successfully')
        self.assertFalse(default_storage.exists(stored))

    def test_delete_missing_file_succeeds(self):
        result = images.delete_image('products/gone.webp')
        self.assertTrue(result['success'])
        self.assertIn('File not found', result['message'])

    def test_promote_staging_images(self):
        staged = images.upload_image(png_payload(), 'Floor.png', 'image/png', folder='staging')['filename']
        self.assertTrue(images.is_staging_path(staged))

        result = images.promote_staging_images(
            [staged, 'products/kept.webp'],
            category_slug='floors',
            product_name='Oak Parquet',
        )

        self.assertEqual(result['failed'], [])
        self.assertEqual(result['path_map'], {staged: 'products/floors/oak-parquet/floor.webp'})
        self.assertFalse(default_storage.exists(staged))
        self.assertEqual(
            images.apply_path_map([staged, 'products/kept.webp'], result['path_map']),
            ['products/floors/oak-parquet/floor.webp', 'products/kept.webp']
        )

    def test_promote_reports_missing_files(self):
        result = images.promote_staging_images(['staging/temp-1/missing.webp'], slug='oak')
        self.assertEqual(result, {'path_map': {}, 'failed': ['staging/temp-1/missing.webp']})

    def test_cleanup_images(self):
        stored = images.upload_image(png_payload(), 'Floor.png', 'image/png', slug='oak')['filename']
        self.assertEqual(images.cleanup_images([stored, 'products/gone.webp']), 1)
