"""
Table dependency analysis over the foreign keys of a collected schema
"""

import networkx as nx
from typing import Dict, List, Any, Tuple
from ..database.models import DatabaseSchema


class SchemaAnalyzer:
    """Analyze schema relationships as a directed graph

    Edges point from the referencing table to the referenced table.
    """

    def __init__(self):
        self.relationship_graph = nx.DiGraph()
        self._positions: Dict[str, int] = {}

    def analyze_schema(self, schema: DatabaseSchema) -> Dict[str, Any]:
        """Analyze schema and return dependency insights"""
        self._build_relationship_graph(schema)

        return {
            'dependencies': self._analyze_table_dependencies(schema),
            'circular_references': self._find_circular_references(),
            'insertion_order': self._get_optimal_insertion_order(schema),
            'deletion_order': self._get_optimal_deletion_order(schema)
        }

    def _build_relationship_graph(self, schema: DatabaseSchema):
        """Build a graph of table relationships"""
        self.relationship_graph.clear()
        self._positions = {table.name: i for i, table in enumerate(schema.tables)}

        for table in schema.tables:
            self.relationship_graph.add_node(table.name, type=table.type)

        for rel in schema.relationships:
            for name in (rel.from_table, rel.to_table):
                if name not in self._positions:
                    self._positions[name] = len(self._positions)
            if self.relationship_graph.has_edge(rel.from_table, rel.to_table):
                self.relationship_graph[rel.from_table][rel.to_table]['constraints'].append(rel.name)
            else:
                self.relationship_graph.add_edge(rel.from_table, rel.to_table, constraints=[rel.name])

    def _position(self, table_name: str) -> int:
        return self._positions.get(table_name, len(self._positions))

    def _analyze_table_dependencies(self, schema: DatabaseSchema) -> Dict[str, List[str]]:
        """Which tables each table references"""
        dependencies = {table.name: [] for table in schema.tables}

        for rel in schema.relationships:
            deps = dependencies.setdefault(rel.from_table, [])
            if rel.to_table not in deps:
                deps.append(rel.to_table)

        return dependencies

    def _find_circular_references(self) -> List[List[str]]:
        """Find circular references, self-references included"""
        return [list(cycle) for cycle in nx.simple_cycles(self.relationship_graph)]

    def _get_optimal_insertion_order(self, schema: DatabaseSchema) -> List[str]:
        """Referenced tables before the tables that point at them"""
        try:
            return list(nx.lexicographical_topological_sort(
                self.relationship_graph.reverse(copy=False), key=self._position))
        except nx.NetworkXUnfeasible:
            # Cycles make a strict order impossible
            return self._get_dependency_based_order(schema)

    def _get_optimal_deletion_order(self, schema: DatabaseSchema) -> List[str]:
        """Get optimal order for deleting data to avoid constraint violations"""
        return list(reversed(self._get_optimal_insertion_order(schema)))

    def _get_dependency_based_order(self, schema: DatabaseSchema) -> List[str]:
        """Get table order based on dependency analysis"""
        dependencies = self._analyze_table_dependencies(schema)

        return sorted(
            dependencies.keys(),
            key=lambda name: (len(dependencies[name]), self._position(name))
        )

    def get_required_tables_for_insert(self, target_table: str, schema: DatabaseSchema) -> List[str]:
        """Get tables that must be populated before inserting into target table"""
        self._build_relationship_graph(schema)
        return self._required_tables(target_table)

    def _required_tables(self, target_table: str) -> List[str]:
        if target_table not in self.relationship_graph:
            return []

        required = nx.descendants(self.relationship_graph, target_table)
        required.discard(target_table)
        return sorted(required, key=self._position)

    def validate_insert_order(self, tables: List[str], schema: DatabaseSchema) -> Tuple[bool, List[str]]:
        """Validate if the proposed insert order is valid"""
        if not tables:
            return True, []

        self._build_relationship_graph(schema)
        errors = []
        inserted_tables = set()

        for table in tables:
            required = self._required_tables(table)
            missing = [req for req in required if req not in inserted_tables]

            if missing:
                errors.append(f"Table '{table}' requires tables {missing} to be inserted first")

            inserted_tables.add(table)

        return len(errors) == 0, errors
