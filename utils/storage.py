"""
Storage Module - Image uploads to local disk or an S3 bucket

One ImageStorage interface with two backends. The backend is chosen once
from UPLOAD_STRATEGY when the app is created; callers only ever use
get_image_storage().store() / .remove().
"""

import os
import time
import secrets
from collections import namedtuple
from urllib.parse import urlparse
import requests
from flask import current_app
from werkzeug.utils import secure_filename
from .errors import ValidationError, StorageError


StoredImage = namedtuple('StoredImage', ['url', 'storage_id'])
ImageUrlCheck = namedtuple('ImageUrlCheck', ['valid', 'reason', 'content_type'], defaults=(None, None))

IMAGE_TYPES = {
    'image/jpeg': ('.jpg', '.jpeg'),
    'image/png': ('.png',),
    'image/webp': ('.webp',),
}
GIF_TYPES = {
    'image/gif': ('.gif',),
}
CONTENT_TYPE_ALIASES = {
    'image/jpg': 'image/jpeg',
    'image/pjpeg': 'image/jpeg',
}


def allowed_image_types(allow_gif=False):
    types = dict(IMAGE_TYPES)
    if allow_gif:
        types.update(GIF_TYPES)
    return types


def validate_image(filename, content_type, size, max_size, allow_gif=False):
    """
    Check an upload against the type allow-list and the size ceiling.

    Both the file extension and the declared content type must be allowed
    and agree with each other.

    Returns:
        str: Normalised content type

    Raises:
        ValidationError: With a message suitable for the uploader
    """
    types = allowed_image_types(allow_gif)
    names = ', '.join(t.split('/')[1].upper() for t in types)

    if not filename:
        raise ValidationError('No file provided')

    extension = os.path.splitext(filename)[1].lower()
    content_type = (content_type or '').split(';')[0].strip().lower()
    content_type = CONTENT_TYPE_ALIASES.get(content_type, content_type)

    if not content_type:
        content_type = next((t for t, exts in types.items() if extension in exts), '')

    if content_type not in types or extension not in types[content_type]:
        raise ValidationError(f'Only {names} images are allowed')

    if not size:
        raise ValidationError('File is empty')

    if size > max_size:
        raise ValidationError(f'File size must be less than {round(max_size / 1024 / 1024)}MB')

    return content_type


def generate_filename(original_filename):
    """<name>-<millis>-<random><ext>, safe for both disk and object keys"""
    base, extension = os.path.splitext(original_filename)
    base = secure_filename(base) or 'image'
    return f"{base[:80]}-{int(time.time() * 1000)}-{secrets.token_hex(4)}{extension.lower()}"


class ImageStorage:
    """Base class: validation, section checks and old image cleanup"""

    def __init__(self, sections, max_size, allow_gif=False):
        self.sections = tuple(sections)
        self.max_size = max_size
        self.allow_gif = allow_gif

    def check_section(self, section):
        if section not in self.sections:
            raise ValidationError('Invalid section')
        return section

    def store(self, data, original_filename, section, previous_reference=None, content_type=None):
        """
        Validate and persist an image, then drop the image it replaces.

        Args:
            data (bytes): File content
            original_filename (str): Name supplied by the uploader
            section (str): Logical folder, e.g. 'profile' or 'projects'
            previous_reference (str, optional): URL or storage id of the replaced image
            content_type (str, optional): Declared MIME type

        Returns:
            StoredImage: Public URL and backend storage id
        """
        self.check_section(section)
        content_type = validate_image(original_filename, content_type, len(data or b''),
                                      self.max_size, self.allow_gif)

        stored = self._write(data, original_filename, section, content_type)

        if previous_reference and previous_reference not in stored:
            self._cleanup(previous_reference)

        return stored

    def _cleanup(self, previous_reference):
        try:
            if not self.remove(previous_reference, previous_reference):
                current_app.logger.warning(f"Could not delete previous image {previous_reference}")
        except Exception as e:
            current_app.logger.warning(f"Failed to delete previous image {previous_reference}: {str(e)}")

    def _write(self, data, original_filename, section, content_type):
        raise NotImplementedError

    def remove(self, url, storage_id=None):
        """
        Delete an image. References the backend does not own are a no-op
        that counts as success; real failures return False, never raise.
        """
        raise NotImplementedError


class LocalImageStorage(ImageStorage):
    """Files under <root>/<section>/, served from <url_prefix>/<section>/"""

    name = 'local'

    def __init__(self, root, url_prefix='/images', **kwargs):
        super().__init__(**kwargs)
        self.root = os.path.abspath(root)
        self.url_prefix = '/' + url_prefix.strip('/')

    def _write(self, data, original_filename, section, content_type):
        directory = os.path.join(self.root, section)
        try:
            os.makedirs(directory, exist_ok=True)
            # Exclusive create so concurrent uploads never overwrite each other
            for _ in range(5):
                filename = generate_filename(original_filename)
                try:
                    with open(os.path.join(directory, filename), 'xb') as f:
                        f.write(data)
                    break
                except FileExistsError:
                    continue
            else:
                raise StorageError('Could not allocate a unique file name')
        except OSError as e:
            current_app.logger.error(f"Local upload failed: {str(e)}")
            raise StorageError('Upload failed')

        current_app.logger.info(f"Stored image {section}/{filename} on local disk")
        return StoredImage(f"{self.url_prefix}/{section}/{filename}", f"{section}/{filename}")

    def path_for(self, reference):
        """
        Absolute path for a URL under url_prefix or a '<section>/<name>'
        storage id. None when the reference does not point inside the root.
        """
        if not reference:
            return None
        parsed = urlparse(reference)
        if parsed.scheme or parsed.netloc:
            return None
        if parsed.path.startswith(self.url_prefix + '/'):
            relative = parsed.path[len(self.url_prefix) + 1:]
        elif not reference.startswith('/'):
            relative = reference
        else:
            return None
        full_path = os.path.abspath(os.path.join(self.root, relative))
        if os.path.commonpath([full_path, self.root]) != self.root or full_path == self.root:
            return None
        return full_path

    def is_external(self, reference):
        """True for references this backend never wrote: other hosts or paths outside url_prefix"""
        parsed = urlparse(reference or '')
        if parsed.scheme or parsed.netloc:
            return True
        return reference.startswith('/') and not parsed.path.startswith(self.url_prefix + '/')

    def remove(self, url, storage_id=None):
        full_path = self.path_for(url) or self.path_for(storage_id)
        if full_path is None:
            references = [r for r in (url, storage_id) if r]
            if references and all(self.is_external(r) for r in references):
                current_app.logger.info(f"Skipping delete of external image {url}")
                return True
            current_app.logger.warning(f"Refusing to delete image outside the upload root: {url}")
            return False
        try:
            if os.path.exists(full_path):
                os.remove(full_path)
                current_app.logger.info(f"Deleted local image {full_path}")
            return True
        except OSError as e:
            current_app.logger.error(f"Failed to delete image {full_path}: {str(e)}")
            return False


class S3ImageStorage(ImageStorage):
    """Objects under <key_prefix>/<section>/ in one bucket, served through a CDN"""

    name = 's3'

    def __init__(self, client, bucket, key_prefix='portfolio', public_base_url=None, region=None, **kwargs):
        super().__init__(**kwargs)
        self.client = client
        self.bucket = bucket
        self.key_prefix = key_prefix.strip('/')
        if public_base_url:
            self.public_base_url = public_base_url.rstrip('/')
        else:
            self.public_base_url = f"https://{bucket}.s3.{region or 'us-east-1'}.amazonaws.com"

    def _write(self, data, original_filename, section, content_type):
        from botocore.exceptions import BotoCoreError, ClientError

        key = f"{self.key_prefix}/{section}/{generate_filename(original_filename)}"
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl='public, max-age=31536000',
            )
        except (BotoCoreError, ClientError) as e:
            current_app.logger.error(f"S3 upload failed: {str(e)}")
            raise StorageError('Upload failed')

        current_app.logger.info(f"Stored image s3://{self.bucket}/{key}")
        return StoredImage(f"{self.public_base_url}/{key}", key)

    def key_for(self, url, storage_id=None):
        """Resolve an object key from a storage id or a public URL"""
        for reference in (storage_id, url):
            if not reference:
                continue
            if reference.startswith(self.public_base_url + '/'):
                return reference[len(self.public_base_url) + 1:]
            if reference.startswith(self.key_prefix + '/'):
                return reference
        return None

    def remove(self, url, storage_id=None):
        from botocore.exceptions import BotoCoreError, ClientError

        key = self.key_for(url, storage_id)
        if key is None:
            current_app.logger.info(f"Skipping delete of image outside bucket {self.bucket}: {url}")
            return True
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
            current_app.logger.info(f"Deleted s3://{self.bucket}/{key}")
            return True
        except (BotoCoreError, ClientError) as e:
            current_app.logger.error(f"Failed to delete s3://{self.bucket}/{key}: {str(e)}")
            return False


def create_image_storage(config, root_path='.', s3_client=None):
    """Build the storage backend selected by UPLOAD_STRATEGY"""
    common = {
        'sections': config.get('IMAGE_SECTIONS', ('profile', 'projects', 'general')),
        'max_size': config.get('MAX_FILE_SIZE', 5 * 1024 * 1024),
        'allow_gif': config.get('ALLOW_GIF_UPLOADS', False),
    }
    strategy = (config.get('UPLOAD_STRATEGY') or 'local').lower()

    if strategy == 's3' and config.get('S3_BUCKET'):
        if s3_client is None:
            import boto3
            s3_client = boto3.client(
                's3',
                region_name=config.get('S3_REGION'),
                endpoint_url=config.get('S3_ENDPOINT_URL'),
                aws_access_key_id=config.get('AWS_ACCESS_KEY_ID'),
                aws_secret_access_key=config.get('AWS_SECRET_ACCESS_KEY'),
            )
        return S3ImageStorage(
            client=s3_client,
            bucket=config['S3_BUCKET'],
            key_prefix=config.get('S3_KEY_PREFIX', 'portfolio'),
            public_base_url=config.get('S3_PUBLIC_BASE_URL'),
            region=config.get('S3_REGION'),
            **common
        )

    root = config.get('UPLOAD_FOLDER', 'static/images')
    if not os.path.isabs(root):
        root = os.path.join(root_path, root)
    return LocalImageStorage(root=root, url_prefix=config.get('UPLOAD_URL_PREFIX', '/images'), **common)


def init_image_storage(app, s3_client=None):
    strategy = (app.config.get('UPLOAD_STRATEGY') or 'local').lower()
    if strategy == 's3' and not app.config.get('S3_BUCKET'):
        app.logger.warning("UPLOAD_STRATEGY is s3 but S3_BUCKET is not set, using local storage")
    storage = create_image_storage(app.config, app.root_path, s3_client=s3_client)
    app.extensions['image_storage'] = storage
    app.logger.info(f"✓ Image storage backend: {storage.name}")
    return storage


def get_image_storage():
    return current_app.extensions['image_storage']


def validate_image_url(url, timeout=5):
    """
    Check that a remote URL answers with an image, within a bounded wait.

    Timeouts and network errors produce an invalid result, never an exception.
    """
    parsed = urlparse(url or '')
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return ImageUrlCheck(False, 'URL must start with http:// or https://')

    try:
        response = requests.head(url, timeout=timeout, allow_redirects=True)
        content_type = response.headers.get('Content-Type', '')
        if response.status_code in (403, 405, 501) or (response.ok and not content_type):
            # Some hosts reject HEAD; fetch headers with a streamed GET instead
            with requests.get(url, timeout=timeout, stream=True, allow_redirects=True) as response:
                content_type = response.headers.get('Content-Type', '')
    except requests.Timeout:
        return ImageUrlCheck(False, f'Timed out after {timeout:g} seconds')
    except requests.RequestException as e:
        current_app.logger.debug(f"Image URL check failed for {url}: {str(e)}")
        return ImageUrlCheck(False, 'Could not reach URL')

    if not response.ok:
        return ImageUrlCheck(False, f'URL returned HTTP {response.status_code}')

    content_type = content_type.split(';')[0].strip().lower()
    if not content_type.startswith('image/'):
        return ImageUrlCheck(False, 'URL does not point to an image', content_type or None)

    return ImageUrlCheck(True, None, content_type)


__all__ = [
    'StoredImage',
    'ImageUrlCheck',
    'allowed_image_types',
    'validate_image',
    'generate_filename',
    'ImageStorage',
    'LocalImageStorage',
    'S3ImageStorage',
    'create_image_storage',
    'init_image_storage',
    'get_image_storage',
    'validate_image_url'
]
