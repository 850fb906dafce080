import click
import logging
from flask.cli import with_appcontext
from sqlalchemy import select
from .models import db, ApplicationRecord, ResponseRecord
from .services.image_store import get_image_store

logger = logging.getLogger(__name__)


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the database tables and the uploads directory."""
    logger.info("Starting database initialization")
    db.create_all()
    logger.info("Database tables created successfully")

    store = get_image_store()
    store.ensure_dir()
    logger.info(f"Uploads directory ready: {store.uploads_dir}")
    click.echo('Initialized the database.')


def collect_image_references():
    """Map every stored image filename to the records referencing it."""
    references = {}

    for record in db.session.scalars(select(ApplicationRecord)):
        for label, name in (('MeterImageData', record.meter_image_data),
                            ('TimerPanelImage', record.timer_panel_image)):
            if name:
                references.setdefault(name, []).append(f"{record.consumer_id}.{label}")

    for response in db.session.scalars(select(ResponseRecord)):
        if response.pole_image_data:
            references.setdefault(response.pole_image_data, []).append(
                f"{response.consumer_id}.Response[{response.id}].PoleImageData"
            )

    return references


@click.command('check-images')
@click.option('--remove-orphans', is_flag=True, help='Delete upload files no record references')
@with_appcontext
def check_images_command(remove_orphans):
    """Check that stored image references and upload files agree."""
    logger.info(f"Starting image reference check (remove_orphans={remove_orphans})")
    store = get_image_store()
    references = collect_image_references()
    files = set(store.list_files())

    missing = sorted(name for name in references if not store.exists(name))
    orphans = sorted(files - set(references))

    for name in missing:
        logger.warning(f"Referenced image missing from uploads: {name}")
        click.echo(f"Missing file {name} referenced by {', '.join(references[name])}")

    removed = 0
    for name in orphans:
        click.echo(f"Orphaned file {name}")
        if remove_orphans:
            result = store.delete(name)
            if result.deleted:
                removed += 1
            else:
                click.echo(f"  Could not remove {name}: {result.error}")

    click.echo(f"Checked {len(references)} referenced images and {len(files)} files: "
               f"{len(missing)} missing, {len(orphans)} orphaned, {removed} removed.")
    logger.info(f"Image check completed: missing={len(missing)}, orphans={len(orphans)}, removed={removed}")
