"""
Management command to create and manage POS backups
Usage:
    python manage.py backup create [--name NAME] [--no-db] [--no-json] [--no-images]
    python manage.py backup list
    python manage.py backup delete NAME
    python manage.py backup restore-json NAME [--tables products,categories]
    python manage.py backup prune --keep 7
"""
from django.core.management.base import BaseCommand, CommandError
from retailpos.core.backup import BackupManager, BackupError

DEFAULT_KEEP = 7


class Command(BaseCommand):
    help = 'Create, list, delete, prune and restore POS backups'

    def add_arguments(self, parser):
        parser.add_argument(
            'action',
            choices=['create', 'list', 'delete', 'restore-json', 'prune'],
            help='Backup action to run',
        )
        parser.add_argument(
            'target',
            nargs='?',
            help='Backup name (delete, restore-json)',
        )
        parser.add_argument('--name', help='Custom backup name (create)')
        parser.add_argument('--no-db', action='store_true', help='Skip database file copy')
        parser.add_argument('--no-json', action='store_true', help='Skip JSON export')
        parser.add_argument('--no-images', action='store_true', help='Skip images copy')
        parser.add_argument('--tables', help='Comma-separated tables to restore (restore-json)')
        parser.add_argument('--keep', type=int, default=DEFAULT_KEEP,
                            help=f'Number of backups to keep (prune, default {DEFAULT_KEEP})')

    def handle(self, *args, **options):
        manager = BackupManager()
        action = options['action']

        try:
            if action == 'create':
                self._create(manager, options)
            elif action == 'list':
                self._list(manager)
            elif action == 'delete':
                name = self._require_target(options, 'delete')
                manager.delete(name)
                self.stdout.write(self.style.SUCCESS(f'Backup {name} deleted'))
            elif action == 'restore-json':
                self._restore(manager, options)
            elif action == 'prune':
                deleted = manager.prune(options['keep'])
                self.stdout.write(self.style.SUCCESS(
                    f"Pruned {len(deleted)} backup(s), kept newest {options['keep']}"
                ))
                for name in deleted:
                    self.stdout.write(f'  - {name}')
        except BackupError as e:
            raise CommandError(str(e))

    @staticmethod
    def _require_target(options, action):
        if not options['target']:
            raise CommandError(f'Please specify the backup name: manage.py backup {action} <name>')
        return options['target']

    def _create(self, manager, options):
        self.stdout.write('Starting backup...')
        path = manager.create(
            name=options['name'],
            include_database=not options['no_db'],
            include_json=not options['no_json'],
            include_images=not options['no_images'],
        )
        manifest = manager.read_manifest(path) or {}
        size_mb = manifest.get('total_size', 0) / (1024 * 1024)
        self.stdout.write(self.style.SUCCESS('Backup completed successfully'))
        self.stdout.write(f'  Location: {path}')
        self.stdout.write(f"  Files: {manifest.get('file_count', 0)}")
        self.stdout.write(f'  Size: {size_mb:.2f} MB')

    def _list(self, manager):
        backups = manager.list()
        if not backups:
            self.stdout.write('No backups found')
            return

        self.stdout.write('Available backups:')
        for index, backup in enumerate(backups, start=1):
            size_mb = backup['size'] / (1024 * 1024)
            self.stdout.write(f"{index}. {backup['name']}")
            self.stdout.write(f"   Created: {backup['created']:%Y-%m-%d %H:%M:%S}")
            self.stdout.write(f"   Size: {size_mb:.2f} MB ({backup['file_count']} files)")
            if backup['manifest']:
                components = ', '.join(backup['manifest'].get('components', {}).keys())
                self.stdout.write(f'   Components: {components}')

    def _restore(self, manager, options):
        name = self._require_target(options, 'restore-json')
        tables = None
        if options['tables']:
            tables = [t.strip() for t in options['tables'].split(',') if t.strip()]
        restored = manager.restore_json(name, tables=tables)
        for table, count in restored.items():
            self.stdout.write(f'  {table}: {count} rows')
        self.stdout.write(self.style.SUCCESS(f'Restored {len(restored)} table(s) from {name}'))
