"""
Backup manager for the POS database, configuration files and product images.

A backup is a folder under BACKUP_ROOT holding:
    db.sqlite3             copy of the SQLite database file
    data-export.json       every table dumped as JSON rows
    config/                configuration files from BACKUP_CONFIG_FILES
    images/                copy of MEDIA_ROOT
    backup-manifest.json   what was written, with sizes
    restore.sh             shell script that puts the files back
"""
import json
import logging
import os
import shutil
from datetime import datetime
from pathlib import Path

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError, connection, transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

EXPORT_VERSION = '1.0.0'
DATABASE_FILENAME = 'db.sqlite3'
JSON_EXPORT_FILENAME = 'data-export.json'
MANIFEST_FILENAME = 'backup-manifest.json'
RESTORE_SCRIPT_FILENAME = 'restore.sh'
CONFIG_DIRNAME = 'config'
IMAGES_DIRNAME = 'images'
BACKUP_NAME_PREFIX = 'pos-backup-'


class BackupError(Exception):
    """Raised when a backup cannot be created, found or restored"""


def directory_size(path):
    """Return (file_count, total_bytes) for everything below path"""
    count = 0
    size = 0
    path = Path(path)
    if not path.exists():
        return 0, 0
    for item in path.rglob('*'):
        if item.is_file():
            count += 1
            size += item.stat().st_size
    return count, size


class BackupManager:
    """Create, list, delete, prune and restore backups"""

    def __init__(self, backup_root=None):
        self.backup_root = Path(backup_root or settings.BACKUP_ROOT)
        self.base_dir = Path(settings.BASE_DIR)
        self.database_path = Path(str(settings.DATABASES['default']['NAME']))
        self.media_root = Path(settings.MEDIA_ROOT)
        self.config_files = list(getattr(settings, 'BACKUP_CONFIG_FILES', []))

    def _ensure_backup_root(self):
        if not self.backup_root.exists():
            self.backup_root.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created backups directory {self.backup_root}")

    @staticmethod
    def default_name(now=None):
        now = now or timezone.localtime()
        return f"{BACKUP_NAME_PREFIX}{now.strftime('%Y-%m-%d_%H-%M-%S')}"

    def _resolve(self, name):
        if not name or name in ('.', '..') or '/' in name or '\\' in name or os.sep in name:
            raise BackupError(f"Invalid backup name: {name!r}")
        return self.backup_root / name

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------
    def create(self, name=None, include_database=True, include_json=True, include_images=True):
        """Create a backup folder and return its path"""
        self._ensure_backup_root()
        backup_name = name or self.default_name()
        backup_path = self._resolve(backup_name)
        if backup_path.exists():
            raise BackupError(f"Backup {backup_name} already exists")

        logger.info(f"Starting backup {backup_name}")
        backup_path.mkdir(parents=True)

        manifest = {
            'timestamp': timezone.now().isoformat(),
            'backup_name': backup_name,
            'components': {},
            'file_count': 0,
            'total_size': 0,
        }

        try:
            if include_database and self.database_path.is_file():
                target = backup_path / DATABASE_FILENAME
                shutil.copy2(self.database_path, target)
                self._record_file(manifest, 'database', target)
                logger.info("Database file copied")

            if include_json:
                target = backup_path / JSON_EXPORT_FILENAME
                table_count = self.export_json(target)
                self._record_file(manifest, 'json_export', target)
                manifest['components']['json_export']['tables'] = table_count
                logger.info(f"Exported {table_count} tables to JSON")

            self._copy_config(backup_path, manifest)

            if include_images and self.media_root.is_dir():
                images_path = backup_path / IMAGES_DIRNAME
                shutil.copytree(self.media_root, images_path)
                count, size = directory_size(images_path)
                manifest['components']['images'] = {
                    'folder': IMAGES_DIRNAME,
                    'file_count': count,
                    'size': size,
                    'status': 'success',
                }
                manifest['file_count'] += count
                manifest['total_size'] += size
                logger.info(f"Images copied ({count} files)")

            with open(backup_path / MANIFEST_FILENAME, 'w', encoding='utf-8') as fh:
                json.dump(manifest, fh, indent=2)

            self._write_restore_script(backup_path)
        except Exception as e:
            logger.error(f"Backup {backup_name} failed: {str(e)}")
            shutil.rmtree(backup_path, ignore_errors=True)
            raise BackupError(f"Backup failed: {str(e)}") from e

        logger.info(
            f"Backup {backup_name} completed: {manifest['file_count']} files, "
            f"{manifest['total_size']} bytes"
        )
        return backup_path

    @staticmethod
    def _record_file(manifest, component, path):
        size = path.stat().st_size
        manifest['components'][component] = {'file': path.name, 'size': size, 'status': 'success'}
        manifest['file_count'] += 1
        manifest['total_size'] += size

    def _copy_config(self, backup_path, manifest):
        config_path = backup_path / CONFIG_DIRNAME
        config_path.mkdir()
        copied = []
        for filename in self.config_files:
            source = self.base_dir / filename
            if not source.is_file():
                continue
            target = config_path / source.name
            shutil.copy2(source, target)
            copied.append(source.name)
            manifest['file_count'] += 1
            manifest['total_size'] += target.stat().st_size
        manifest['components']['configuration'] = {
            'folder': CONFIG_DIRNAME,
            'files': copied,
            'status': 'success',
        }

    def export_json(self, output_path):
        """Dump every non-internal table to JSON. Returns the table count."""
        data = {
            'timestamp': timezone.now().isoformat(),
            'version': EXPORT_VERSION,
            'tables': {},
        }
        with connection.cursor() as cursor:
            table_names = [
                name for name in connection.introspection.table_names(cursor)
                if not name.startswith('sqlite_')
            ]
            for table in table_names:
                try:
                    cursor.execute(f"SELECT * FROM {connection.ops.quote_name(table)}")
                    columns = [col[0] for col in cursor.description]
                    rows = [dict(zip(columns, row)) for row in cursor.fetchall()]
                    data['tables'][table] = rows
                    logger.debug(f"Exported {table}: {len(rows)} records")
                except Exception as e:
                    logger.warning(f"Could not export table {table}: {str(e)}")
                    data['tables'][table] = {'error': str(e)}

        with open(output_path, 'w', encoding='utf-8') as fh:
            json.dump(data, fh, indent=2, cls=DjangoJSONEncoder)
        return len(table_names)

    def _write_restore_script(self, backup_path):
        generated = timezone.now().isoformat()
        script = f"""#!/bin/bash
# POS system restore script
# Generated on: {generated}
set -e
cd "$(dirname "$0")"

DB_PATH="{self.database_path}"
BASE_DIR="{self.base_dir}"
MEDIA_ROOT="{self.media_root}"

echo "Starting POS system restore..."

if [ -f "{DATABASE_FILENAME}" ]; then
    if [ -f "$DB_PATH" ]; then
        echo "Saving current database..."
        cp "$DB_PATH" "$DB_PATH.backup.$(date +%Y%m%d_%H%M%S)"
    fi
    echo "Restoring database..."
    mkdir -p "$(dirname "$DB_PATH")"
    cp "{DATABASE_FILENAME}" "$DB_PATH"
fi

if [ -d "{CONFIG_DIRNAME}" ] && [ -n "$(ls -A {CONFIG_DIRNAME})" ]; then
    echo "Restoring configuration files..."
    cp {CONFIG_DIRNAME}/* "$BASE_DIR"/
fi

if [ -d "{IMAGES_DIRNAME}" ]; then
    echo "Restoring images..."
    mkdir -p "$MEDIA_ROOT"
    cp -r {IMAGES_DIRNAME}/. "$MEDIA_ROOT"/
fi

echo "Restore completed."
"""
        script_path = backup_path / RESTORE_SCRIPT_FILENAME
        script_path.write_text(script, encoding='utf-8')
        os.chmod(script_path, 0o755)

    # ------------------------------------------------------------------
    # list / delete / prune
    # ------------------------------------------------------------------
    def read_manifest(self, backup_path):
        manifest_path = backup_path / MANIFEST_FILENAME
        if not manifest_path.is_file():
            return None
        try:
            with open(manifest_path, encoding='utf-8') as fh:
                return json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read manifest for {backup_path.name}: {str(e)}")
            return None

    def list(self):
        """Backups, newest first"""
        if not self.backup_root.exists():
            return []

        backups = []
        for item in self.backup_root.iterdir():
            if not item.is_dir():
                continue
            manifest = self.read_manifest(item)
            created = None
            if manifest and manifest.get('timestamp'):
                try:
                    created = datetime.fromisoformat(manifest['timestamp'])
                except ValueError:
                    created = None
            if created is None:
                created = datetime.fromtimestamp(item.stat().st_mtime, tz=timezone.get_current_timezone())
            file_count, size = directory_size(item)
            backups.append({
                'name': item.name,
                'path': item,
                'created': created,
                'file_count': file_count,
                'size': size,
                'manifest': manifest,
            })

        backups.sort(key=lambda backup: backup['created'], reverse=True)
        return backups

    def delete(self, name):
        backup_path = self._resolve(name)
        if not backup_path.is_dir():
            raise BackupError(f"Backup {name} not found")
        shutil.rmtree(backup_path)
        logger.info(f"Backup {name} deleted")

    def prune(self, keep):
        """Delete all but the newest `keep` backups; returns deleted names"""
        if keep < 0:
            raise BackupError("keep must be zero or more")
        deleted = []
        for backup in self.list()[keep:]:
            shutil.rmtree(backup['path'])
            deleted.append(backup['name'])
            logger.info(f"Pruned backup {backup['name']}")
        return deleted

    # ------------------------------------------------------------------
    # restore
    # ------------------------------------------------------------------
    def restore_json(self, name, tables=None):
        """
        Reload table rows from a backup's JSON export.

        Each restored table is emptied first. Tables missing from the current
        schema or recorded as export errors are skipped. Returns a dict of
        table name to restored row count.
        """
        export_path = self._resolve(name) / JSON_EXPORT_FILENAME
        if not export_path.is_file():
            raise BackupError(f"Backup {name} has no {JSON_EXPORT_FILENAME}")

        try:
            with open(export_path, encoding='utf-8') as fh:
                export = json.load(fh)
        except ValueError as e:
            raise BackupError(f"Invalid JSON export: {str(e)}") from e

        exported = export.get('tables', {})
        wanted = list(tables) if tables else [t for t in exported if t != 'django_migrations']
        existing = set(connection.introspection.table_names())

        restored = {}
        try:
            with transaction.atomic():
                with connection.constraint_checks_disabled():
                    with connection.cursor() as cursor:
                        for table in wanted:
                            rows = exported.get(table)
                            if table not in existing or not isinstance(rows, list):
                                logger.warning(f"Skipping table {table}: not restorable")
                                continue
                            restored[table] = self._restore_table(cursor, table, rows)
                connection.check_constraints(table_names=list(restored))
        except DatabaseError as e:
            logger.error(f"Restore from backup {name} failed: {str(e)}")
            raise BackupError(f"Restore failed: {str(e)}") from e

        logger.info(f"Restored {len(restored)} tables from backup {name}")
        return restored

    @staticmethod
    def _restore_table(cursor, table, rows):
        quote = connection.ops.quote_name
        description = connection.introspection.get_table_description(cursor, table)
        columns = {col.name for col in description}

        cursor.execute(f"DELETE FROM {quote(table)}")
        for row in rows:
            names = [column for column in row if column in columns]
            if not names:
                continue
            placeholders = ', '.join(['%s'] * len(names))
            cursor.execute(
                f"INSERT INTO {quote(table)} ({', '.join(quote(n) for n in names)}) VALUES ({placeholders})",
                [row[n] for n in names],
            )
        return len(rows)
