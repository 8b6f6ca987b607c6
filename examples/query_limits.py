"""
Query Limits Example

This example demonstrates how to use the alias and depth limits to reject
expensive GraphQL queries before they are executed.
"""

import asyncio
from typing import List, Optional

import strawberry
from graphql import get_introspection_query

from gqlguard import MaxAliasesLimiter, MaxDepthLimiter


@strawberry.type
class Employee:
    name: str
    title: str


@strawberry.type
class Team:
    name: str
    employees: List[Employee]


@strawberry.type
class Department:
    name: str
    teams: List[Team]


@strawberry.type
class Organization:
    name: str
    departments: List[Department]


ORGANIZATIONS = [
    Organization(
        name="TechCorp",
        departments=[
            Department(
                name="Engineering",
                teams=[Team(name="Backend", employees=[Employee(name="John Doe", title="Senior Engineer")])]
            )
        ]
    )
]


@strawberry.type
class Query:
    @strawberry.field
    def organizations(self) -> List[Organization]:
        return ORGANIZATIONS

    @strawberry.field
    def organization(self, name: str) -> Optional[Organization]:
        return next((org for org in ORGANIZATIONS if org.name == name), None)


async def main():
    """Demonstrate alias and depth limiting."""
    print("🛡️  gqlguard Query Limits Demo\n")

    deep_query = """
    query {
        organizations {
            departments {
                teams {
                    employees {
                        name
                    }
                }
            }
        }
    }
    """

    # Example 1: No limits
    print("1️⃣ Schema WITHOUT limits...")
    schema = strawberry.Schema(query=Query)
    result = await schema.execute(deep_query)
    if result.errors:
        print(f"   ❌ Error: {result.errors[0].message}")
    else:
        print(f"   ✅ Success! Retrieved {len(result.data['organizations'])} organizations")

    # Example 2: Depth limit
    print("\n2️⃣ Schema WITH depth limit of 3...")
    schema = strawberry.Schema(query=Query, extensions=[MaxDepthLimiter(n=3)])
    result = await schema.execute(deep_query)
    if result.errors:
        print(f"   ❌ Expected error: {result.errors[0].message}")
    else:
        print("   ✅ Unexpected success")

    # Example 3: Flattened fragments
    print("\n3️⃣ Flattened fragments measure like inlined fields...")
    fragment_query = """
    query {
        ...Orgs
    }

    fragment Orgs on Query {
        organizations {
            name
        }
    }
    """
    for flatten in (False, True):
        schema = strawberry.Schema(
            query=Query,
            extensions=[MaxDepthLimiter(n=2, flatten_fragments=flatten)]
        )
        result = await schema.execute(fragment_query)
        outcome = result.errors[0].message if result.errors else "accepted"
        print(f"   flatten_fragments={flatten}: {outcome}")

    # Example 4: Introspection
    print("\n4️⃣ Introspection with a strict limit...")
    schema = strawberry.Schema(
        query=Query,
        extensions=[MaxDepthLimiter(n=1, ignore_introspection=True)]
    )
    result = await schema.execute(get_introspection_query())
    if result.errors:
        print(f"   ❌ Error: {result.errors[0].message}")
    else:
        print(f"   ✅ Introspection allowed, found {len(result.data['__schema']['types'])} types")

    # Example 5: Alias limit
    print("\n5️⃣ Schema WITH alias limit of 2...")
    aliases = "\n".join(
        f'        o{i}: organization(name: "TechCorp") {{ name }}' for i in range(5)
    )
    alias_query = f"query {{\n{aliases}\n    }}"
    schema = strawberry.Schema(
        query=Query,
        extensions=[MaxAliasesLimiter(n=2, allow_list=["o0"])]
    )
    result = await schema.execute(alias_query)
    if result.errors:
        print(f"   ❌ Expected error: {result.errors[0].message}")
    else:
        print("   ✅ Unexpected success")

    print("\n✅ Demo complete!")
    print("\n💡 Best Practices:")
    print("   - Start with generous limits and tighten them from observed traffic")
    print("   - Allow-list aliases your own clients rely on")
    print("   - Hide limits (expose_limits=False) on public endpoints")


if __name__ == "__main__":
    asyncio.run(main())
