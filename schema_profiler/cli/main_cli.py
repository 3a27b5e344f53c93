"""
Command-line interface for collecting and profiling a database
"""

import argparse
import logging
import sys
from typing import List, Optional

from ..config import Config, setup_logging
from ..database.adapters import normalize_dialect
from ..database.collector import collect_schema
from ..database.errors import ConfigurationError, SchemaProfilerError
from ..database.factory import DatabaseFactory
from ..database.models import DatabaseSchema
from ..utils.data_analyzer import analyze_database
from ..utils.schema_analyzer import SchemaAnalyzer


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='schema-profiler',
        description='Collect database schema snapshots and statistical profiles',
    )
    parser.add_argument('--db-type', help='Database type (postgres or mysql); defaults to DB_TYPE')
    parser.add_argument('--env-file', help='Path to a .env file')
    parser.add_argument('--log-level', help='Logging level; defaults to LOG_LEVEL or INFO')

    subparsers = parser.add_subparsers(dest='command', required=True)

    collect = subparsers.add_parser('collect', help='Collect the schema and save it as JSON')
    collect.add_argument('--output', '-o', help='Schema output file')

    analyze = subparsers.add_parser('analyze', help='Collect and analyze, saving both documents')
    analyze.add_argument('--schema-file', help='Analyze a previously saved schema instead of collecting')
    analyze.add_argument('--schema-output', help='Schema output file')
    analyze.add_argument('--output', '-o', help='Analysis output file')

    subparsers.add_parser('relationships', help='Show table dependencies from foreign keys')

    return parser


def print_schema_summary(schema: DatabaseSchema) -> None:
    info = schema.database_info
    print(f"\n✅ Connected to {info.type} database '{info.name}' ({info.version})")
    print(f"📊 Found {schema.metadata.total_tables} tables, {schema.metadata.total_columns} columns")
    print(f"🔗 Found {len(schema.relationships)} relationships")
    print(f"⏱️  Collected in {schema.metadata.collection_duration_ms} ms")

    print("\n📋 Tables:")
    for i, table in enumerate(schema.tables[:10], 1):
        print(f"  {i}. {table.name} [{table.type}] (~{table.estimated_rows} rows, {len(table.columns)} columns)")
    if len(schema.tables) > 10:
        print(f"  ... and {len(schema.tables) - 10} more tables")


def print_relationships(schema: DatabaseSchema) -> None:
    report = SchemaAnalyzer().analyze_schema(schema)

    print("\n🔗 Table Relationships:")
    for rel in schema.relationships[:20]:
        print(f"  {rel.from_table}.{rel.from_column} -> {rel.to_table}.{rel.to_column} "
              f"[{rel.relationship_type}, on delete {rel.on_delete}]")
    if len(schema.relationships) > 20:
        print(f"  ... and {len(schema.relationships) - 20} more relationships")

    if report['circular_references']:
        print("\n🔁 Circular references:")
        for cycle in report['circular_references']:
            print(f"  {' -> '.join(cycle + cycle[:1])}")

    print("\n📥 Insertion order:")
    print(f"  {', '.join(report['insertion_order'])}")


def run(args: argparse.Namespace, config: Config) -> int:
    db_config = config.database
    settings = config.profiler

    missing = db_config.missing_keys()
    if missing:
        print(f"❌ Missing configuration for {db_config.type}: {', '.join(missing)}")
        return 1

    schema = None
    if args.command == 'analyze' and args.schema_file:
        schema = DatabaseSchema.load_from_file(args.schema_file)
        schema_type = normalize_dialect(schema.database_info.type)
        if schema_type != db_config.type:
            raise ConfigurationError(
                f"{args.schema_file} describes a {schema_type} database, "
                f"but the connection is configured for {db_config.type}")
        print(f"📂 Loaded schema from {args.schema_file}")

    print(f"\n🔌 Connecting to {db_config.type}...")
    engine = DatabaseFactory.create_engine(db_config.type, db_config.to_dict())
    try:
        connection = DatabaseFactory.connect(engine)
        try:
            if schema is None:
                print("\n🔍 Collecting database schema...")
                schema = collect_schema(connection, db_config.type, settings)
                print_schema_summary(schema)

            if args.command == 'collect':
                output = args.output or settings.schema_output
                schema.save_to_file(output)
                print(f"\n💾 Schema saved to {output}")

            elif args.command == 'analyze':
                if not args.schema_file:
                    schema_output = args.schema_output or settings.schema_output
                    schema.save_to_file(schema_output)
                    print(f"\n💾 Schema saved to {schema_output}")

                print("\n📈 Analyzing data...")
                analysis = analyze_database(connection, schema, settings)
                output = args.output or settings.analysis_output
                analysis.save_to_file(output)

                summary = analysis.summary
                print(f"📊 {summary.total_records} records in {summary.total_tables} tables "
                      f"(avg {summary.avg_records_per_table:.1f})")
                print(f"  Largest: {summary.largest_table}, smallest: {summary.smallest_table}")
                print(f"💾 Analysis saved to {output}")

            elif args.command == 'relationships':
                print_relationships(schema)
        finally:
            # Read-only run: nothing to commit
            connection.rollback()
            connection.close()
    finally:
        engine.dispose()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = Config.from_env(args.env_file, db_type=args.db_type)
        setup_logging(args.log_level or config.profiler.log_level)
        return run(args, config)
    except SchemaProfilerError as e:
        logger.debug("Run failed", exc_info=True)
        print(f"\n❌ Error: {e}")
        return 1
    except OSError as e:
        print(f"\n❌ File error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\n👋 Interrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
