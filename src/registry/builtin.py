"""Built-in fallback reference tables.

Used when the configured coach/student files are missing or unreadable,
so the engine can still produce identifiers for the core roster.
"""

from src.registry.schemas import RegistryEntry

BUILTIN_COACHES: tuple[RegistryEntry, ...] = (
    RegistryEntry(
        canonical_name="Jenny",
        first_name="Jenny",
        last_name="Duan",
    ),
    RegistryEntry(
        canonical_name="Jamie",
        first_name="Jamie",
        last_name="JudahBram",
        aliases=frozenset({"Ivylevel Jamie"}),
    ),
    RegistryEntry(
        canonical_name="Rishi", first_name="Rishi", last_name="Padmanabhan"
    ),
    RegistryEntry(
        canonical_name="Aditi",
        first_name="Aditi",
        last_name="Bhaskar",
        aliases=frozenset({"Aditi B"}),
    ),
    RegistryEntry(canonical_name="Noor", first_name="Noor", last_name="Hassan"),
    RegistryEntry(
        canonical_name="Juli", first_name="Juli", aliases=frozenset({"Julie"})
    ),
    RegistryEntry(canonical_name="Kelvin", first_name="Kelvin"),
    RegistryEntry(canonical_name="Erin", first_name="Erin", last_name="Ye"),
    RegistryEntry(canonical_name="Steven", first_name="Steven", last_name="Zhou"),
    RegistryEntry(canonical_name="Marissa", first_name="Marissa"),
    RegistryEntry(canonical_name="Andrew", first_name="Andrew"),
    RegistryEntry(canonical_name="Janice", first_name="Janice", last_name="Teoh"),
    RegistryEntry(canonical_name="Katie", first_name="Katie"),
    RegistryEntry(canonical_name="Alan", first_name="Alan"),
    RegistryEntry(canonical_name="Alice", first_name="Alice"),
    RegistryEntry(canonical_name="Vilina", first_name="Vilina"),
)

BUILTIN_STUDENTS: tuple[RegistryEntry, ...] = (
    RegistryEntry(
        canonical_name="Arshiya",
        first_name="Arshiya",
        aliases=frozenset({"Arshya"}),
    ),
    RegistryEntry(
        canonical_name="Kavya", first_name="Kavya", last_name="Venkatesan"
    ),
    RegistryEntry(
        canonical_name="Aaryan",
        first_name="Aaryan",
        last_name="Shah",
        parent_aliases=frozenset({"Leena", "Leena Shah"}),
    ),
    RegistryEntry(
        canonical_name="Priya",
        first_name="Priya",
        last_name="Patel",
        parent_aliases=frozenset({"Patel Family"}),
    ),
    RegistryEntry(
        canonical_name="Aisha",
        first_name="Aisha",
        last_name="Khan",
        parent_aliases=frozenset({"Khan Family"}),
    ),
    RegistryEntry(
        canonical_name="Anoushka", first_name="Anoushka", last_name="Chakravarty"
    ),
    RegistryEntry(canonical_name="Minseo", first_name="Minseo", last_name="Kim"),
    RegistryEntry(canonical_name="Aarnav", first_name="Aarnav"),
    RegistryEntry(canonical_name="Victoria", first_name="Victoria"),
    RegistryEntry(canonical_name="Ananyaa", first_name="Ananyaa"),
    RegistryEntry(canonical_name="Arushi", first_name="Arushi"),
    RegistryEntry(canonical_name="Huda", first_name="Huda"),
    RegistryEntry(canonical_name="Emma", first_name="Emma"),
    RegistryEntry(canonical_name="Abhi", first_name="Abhi"),
    RegistryEntry(canonical_name="Kabir", first_name="Kabir"),
    RegistryEntry(canonical_name="Netra", first_name="Netra"),
    RegistryEntry(canonical_name="Shashank", first_name="Shashank"),
    RegistryEntry(canonical_name="Sameeha", first_name="Sameeha"),
    RegistryEntry(canonical_name="Danait", first_name="Danait"),
    RegistryEntry(canonical_name="Vihana", first_name="Vihana"),
    RegistryEntry(canonical_name="Zainab", first_name="Zainab"),
    RegistryEntry(canonical_name="Hiba", first_name="Hiba"),
)
