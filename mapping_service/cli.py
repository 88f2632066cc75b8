"""CLI tools for mapping administration."""

import logging
from datetime import datetime

import click

from mapping_service.core.config import settings
from mapping_service.core.errors import MappingServiceError
from mapping_service.db.session import SessionLocal
from mapping_service.services import owner_service, retention_service
from mapping_service.services.mapping_kinds import KINDS, get_kind


@click.group()
def cli():
    """Mapping service CLI tools."""
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(message)s")


@cli.command()
def retention_sweep():
    """
    Delete expired rows from short-lived mapping kinds now.

    Example:
        python -m mapping_service.cli retention-sweep
    """
    db = SessionLocal()
    try:
        deleted = retention_service.run_retention_sweep(db)
        for name, count in deleted.items():
            click.echo(f"✓ {name}: deleted {count} expired mapping(s)")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
        raise
    finally:
        db.close()


@cli.command()
@click.option("--kind", "kind_name", required=True, help="Mapping kind, e.g. court-cases")
@click.option("--after", required=True, help="ISO timestamp; rows created after it are removed")
def rollback_run(kind_name: str, after: str):
    """
    Remove every mapping of one kind created after a checkpoint.

    Example:
        python -m mapping_service.cli rollback-run --kind csras --after 2024-03-24T12:00:00
    """
    try:
        timestamp = datetime.fromisoformat(after)
    except ValueError:
        click.echo(f"❌ Not an ISO timestamp: {after}")
        raise SystemExit(2)

    db = SessionLocal()
    try:
        kind = get_kind(kind_name)
        deleted = retention_service.delete_created_after(db, kind, timestamp)
        db.commit()
        click.echo(f"✓ Deleted {deleted} {kind.name} mapping(s) created after {after}")
    except MappingServiceError as e:
        db.rollback()
        click.echo(f"❌ {e}")
        raise SystemExit(1)
    finally:
        db.close()


@cli.command()
@click.option("--kind", "kind_name", required=True, help="Child mapping kind, e.g. sentences")
@click.option("--parent-id", required=True, help="New-system id of the parent")
def delete_children(kind_name: str, parent_id: str):
    """Delete child mappings registered under one parent."""
    db = SessionLocal()
    try:
        kind = get_kind(kind_name)
        deleted = retention_service.delete_by_parent_id(db, kind, parent_id)
        db.commit()
        click.echo(f"✓ Deleted {deleted} {kind.name} mapping(s) for parent {parent_id}")
    except MappingServiceError as e:
        db.rollback()
        click.echo(f"❌ {e}")
        raise SystemExit(1)
    finally:
        db.close()


@cli.command()
@click.option("--from", "old_owner", required=True, help="Owner id being merged away")
@click.option("--to", "new_owner", required=True, help="Owner id that survives the merge")
def merge_owner(old_owner: str, new_owner: str):
    """Rewrite the owner column on every owner-bearing kind."""
    db = SessionLocal()
    try:
        counts = owner_service.rewrite_owner_everywhere(db, old_owner, new_owner)
        db.commit()
        for name, count in counts.items():
            click.echo(f"✓ {name}: moved {count} mapping(s)")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
        raise
    finally:
        db.close()


@cli.command()
def list_kinds():
    """Show registered mapping kinds and what each supports."""
    for kind in KINDS.values():
        features = []
        if kind.parent_field:
            features.append(f"parent={kind.parent_field}")
        if kind.owner_field:
            features.append(f"owner={kind.owner_field}")
        if kind.aggregate_field:
            features.append(f"aggregate={kind.aggregate_field}")
        if kind.provisional_field:
            features.append("provisional")
        if kind.retention_days_setting:
            features.append(f"retention={kind.retention_days}d")
        legacy = ",".join(kind.legacy_fields)
        click.echo(f"{kind.name}: {legacy} -> {kind.new_id_field} {' '.join(features)}".rstrip())


if __name__ == "__main__":
    cli()
