"""Tests for the alias limit."""

from graphql import build_schema, parse, specified_rules, validate

from gqlguard.config import MaxAliasesConfig
from gqlguard.exceptions import AliasLimitExceeded
from gqlguard.validation import count_aliases, create_max_aliases_rule, validate_aliases

from .example_schemas import ALIASED_QUERY, BOOKSTORE_SDL, CYCLIC_QUERY, fragment_chain


def messages(errors):
    return [error.message for error in errors]


class TestAliasCounting:
    """Test counting aliases across a document."""

    def test_counts_nested_aliases(self):
        """Test that aliases in nested selection sets are counted."""
        document = parse("""
            {
                a: books { t: title author { n: name } }
                b: books { title }
            }
        """)

        assert count_aliases(document).count == 4

    def test_counts_inline_fragments_and_spreads(self):
        """Test that aliases inside fragments are counted wherever they are used."""
        document = parse("""
            {
                ... on Query { a: books { title } }
                books { ...BookFields ...BookFields }
            }
            fragment BookFields on Book { t: title }
        """)

        assert count_aliases(document).count == 3

    def test_unused_fragment_not_counted(self):
        """Test that fragments never spread from an operation are ignored."""
        document = parse("""
            { books { title } }
            fragment Unused on Book { a: title b: title }
        """)

        assert count_aliases(document).count == 0

    def test_alias_equal_to_field_name_not_counted(self):
        """Test that aliasing a field to its own name is not an alias."""
        document = parse("{ books { title: title } }")
        assert count_aliases(document).count == 0

    def test_allow_list_matches_alias_not_field_name(self):
        """Test that the allow-list is checked against aliases only."""
        document = parse("""
            {
                allowed: books { title }
                other: allowed
                allowed: allowed
            }
        """)

        result = count_aliases(document, allow_list=["allowed"])

        assert result.count == 1

    def test_unknown_fragment_counts_nothing(self):
        """Test that spreading an undefined fragment is a no-op."""
        document = parse("{ a: books { title } ...Missing }")
        assert count_aliases(document).count == 1

    def test_counts_across_operations(self):
        """Test that the count is document-wide, not per operation."""
        document = parse("""
            query First { a: books { title } }
            query Second { b: books { title } }
        """)

        assert count_aliases(document).count == 2

    def test_stops_at_first_crossing(self):
        """Test that counting stops once the limit is exceeded."""
        document = parse("{ a: books b: books c: books d: books e: books }")

        result = count_aliases(document, limit=2)

        assert result.count == 3
        assert result.exceeded_at.alias.value == "c"

    def test_cyclic_fragments_terminate(self):
        """Test that mutually recursive fragments do not loop."""
        document = parse("""
            { ...A }
            fragment A on Query { a: books { title } ...B }
            fragment B on Query { b: books { title } ...A }
        """)

        assert count_aliases(document).count == 2

    def test_shared_fragments_do_not_explode(self):
        """Test that a fragment reused many times is counted without re-walking it."""
        document = parse(fragment_chain(30))

        assert count_aliases(document).count == 2 ** 30

    def test_shared_fragments_with_limit(self):
        """Test that reused fragments still stop at the first crossing."""
        document = parse(fragment_chain(30))

        result = count_aliases(document, limit=10)

        assert result.count == 11
        assert result.exceeded_at.alias.value == "a"


class TestValidateAliases:
    """Test alias limit violations."""

    def test_default_config_allows_everything(self):
        """Test that the default configuration never rejects."""
        aliases = " ".join(f"a{i}: books {{ title }}" for i in range(500))
        assert validate_aliases(parse(f"{{ {aliases} }}")) == []

    def test_rejects_query(self):
        """Test the error for two aliases with a limit of one."""
        errors = validate_aliases(parse(ALIASED_QUERY), n=1)

        assert messages(errors) == ["Aliases limit of 1 exceeded, found 2."]
        assert isinstance(errors[0], AliasLimitExceeded)
        assert errors[0].limit == 1
        assert errors[0].found == 2

    def test_within_limit(self):
        """Test that a query at the limit passes."""
        assert validate_aliases(parse(ALIASED_QUERY), n=2) == []

    def test_respects_fragment_aliases(self):
        """Test that aliases from fragment spreads are counted."""
        document = parse("""
            query A {
                getBook(title: "null") {
                    firstTitle: title
                    ...BookFragment
                }
            }
            fragment BookFragment on Book {
                secondTitle: title
            }
        """)

        errors = validate_aliases(document, n=1)

        assert messages(errors) == ["Aliases limit of 1 exceeded, found 2."]
        assert errors[0].nodes[0].alias.value == "secondTitle"

    def test_allowed_aliases_are_not_rejected(self):
        """Test that allow-listed aliases are exempt."""
        document = parse("""
            query {
                allowed: getBook(title: "null") {
                    allowed: author
                }
            }
        """)

        assert validate_aliases(document, n=1, allowList=["allowed"]) == []

    def test_found_is_count_at_first_crossing(self):
        """Test that the reported count is the first value above the limit."""
        document = parse("{ a: books b: books c: books d: books e: books }")

        errors = validate_aliases(document, n=2)

        assert messages(errors) == ["Aliases limit of 2 exceeded, found 3."]
        assert errors[0].locations[0].column == 21

    def test_zero_limit(self):
        """Test that n=0 rejects the first alias."""
        errors = validate_aliases(parse("{ a: books { title } }"), n=0)
        assert messages(errors) == ["Aliases limit of 0 exceeded, found 1."]

    def test_idempotent(self):
        """Test that validating twice gives identical results."""
        document = parse(ALIASED_QUERY)
        config = MaxAliasesConfig(n=1)

        first = validate_aliases(document, config)
        second = validate_aliases(document, config)

        assert messages(first) == messages(second)
        assert first[0].locations == second[0].locations

    def test_hidden_limits(self):
        """Test that limits can be kept out of the error message."""
        errors = validate_aliases(parse(ALIASED_QUERY), n=1, expose_limits=False)

        assert messages(errors) == ["Query validation error."]
        assert errors[0].extensions == {"code": "ALIAS_LIMIT_EXCEEDED"}

    def test_callbacks_and_propagation(self):
        """Test reject callbacks when propagation is disabled."""
        rejected = []
        accepted = []
        config = MaxAliasesConfig(
            n=1,
            propagate_on_rejection=False,
            on_reject=[lambda config, error: rejected.append(error.message)],
            on_accept=[lambda config, document: accepted.append(document)]
        )

        assert validate_aliases(parse(ALIASED_QUERY), config) == []
        assert rejected == ["Aliases limit of 1 exceeded, found 2."]
        assert accepted == []

        document = parse("{ books { title } }")
        assert validate_aliases(document, config) == []
        assert accepted == [document]


class TestMaxAliasesRule:
    """Test the rule inside graphql-core's validation."""

    schema = build_schema(BOOKSTORE_SDL)

    def validate(self, query, rule):
        return validate(self.schema, parse(query), rules=[*specified_rules, rule])

    def test_rule_reports_violation(self):
        """Test that the configured rule reports through the validation context."""
        errors = self.validate(ALIASED_QUERY, create_max_aliases_rule(1))
        assert messages(errors) == ["Aliases limit of 1 exceeded, found 2."]

    def test_default_rule_accepts(self):
        """Test that the rule with default options accepts aliases."""
        errors = self.validate(ALIASED_QUERY, create_max_aliases_rule())
        assert errors == []

    def test_recursive_fragment_reported_by_framework(self):
        """Test that fragment cycles are left to the standard rules."""
        errors = self.validate(CYCLIC_QUERY, create_max_aliases_rule(3))

        assert "Cannot spread fragment 'A' within itself via 'B'." in messages(errors)
        assert not any("Aliases limit" in message for message in messages(errors))
