"""
Example: Fluent OData queries with odata_client
================================================

This example shows how to build, inspect and run OData queries.
"""

from odata_client import ODataClient, ODataAuth, QueryOptions, raw
from odata_client.query import Builder, GrammarV2


TRIPPIN = "https://services.odata.org/TripPinRESTierService/"


def example_compile_only():
    """Compile requests without talking to a service."""
    query = (
        Builder()
        .from_("People")
        .select("UserName", "FirstName", "LastName")
        .where("LastName", "Whyte")
        .or_where(lambda q: q.where("Age", ">", 30).where("Age", "<", 40))
        .order("LastName", "desc")
        .take(5)
    )
    print("Request:", query.to_request())
    print("Bindings:", query.get_bindings())

    # Nested $expand options and raw fragments
    trips = (
        Builder()
        .from_("People")
        .expand(("Trips", lambda t: t.select("Name").where("Budget", ">", raw("1000")).take(2)))
    )
    print("Expand:", trips.to_request())

    # OData v2 dialect
    v2 = Builder(grammar=GrammarV2()).from_("Products").where("Name", "substringof", "Milk")
    print("V2:", v2.to_request())


def example_basic_query():
    """Run queries against the public TripPin service."""
    with ODataClient(TRIPPIN) as client:
        russell = client.from_("People").find("russellwhyte")
        print("Russell:", russell)

        people = client.from_("People").where("FirstName", "startswith", "S").get(
            ["UserName", "FirstName"], QueryOptions.INCLUDE_COUNT
        )
        print(f"Found {len(people)} of {people.total_count} people")

        print("People count:", client.from_("People").count())

        for page in client.from_("Airports").pages(max_pages=2):
            print(f"Page with {len(page)} airports")


def example_authenticated():
    """Explicit credentials; without arguments ODATA_* env vars are read."""
    client = ODataClient(
        "https://your-service.example.com/odata/",
        auth=ODataAuth("bearer", "ACCESS_TOKEN"),
    )
    with client:
        new_id = client.from_("People").insert_get_id({"UserName": "ann", "FirstName": "Ann"})
        client.from_("People").where_key(new_id).patch({"LastName": "Smith"})
        client.from_("People").where_key(new_id).delete()


if __name__ == "__main__":
    # Uncomment the example you want to run
    example_compile_only()
    # example_basic_query()
    # example_authenticated()
