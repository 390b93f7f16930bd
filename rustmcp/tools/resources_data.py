"""Static Rust reference material exposed as resources."""

from rustmcp.tools.base import ResourceDescriptor

COMMON_ERRORS = ResourceDescriptor(
    name="Rust Common Errors",
    description="Reference guide to common Rust compiler errors and how to fix them",
    uri="rust://reference/common-errors",
    kind="reference",
    data={
        "errors": [
            {
                "code": "E0308",
                "title": "Mismatched types",
                "description": "Rust cannot reconcile two different types where one is required.",
                "example": 'fn main() { let x: i32 = "hello"; }',
                "solution": "Make the annotation match the actual type or add an explicit conversion.",
            },
            {
                "code": "E0382",
                "title": "Use of moved value",
                "description": "A value is used after ownership of it was moved elsewhere.",
                "example": 'fn main() { let s1 = String::from("hello"); let s2 = s1; println!("{}", s1); }',
                "solution": "Clone the value, borrow it instead, or restructure so the move happens last.",
            },
            {
                "code": "E0502",
                "title": "Cannot borrow as mutable because it is also borrowed as immutable",
                "description": "A mutable borrow overlaps an immutable borrow of the same value.",
                "example": 'fn main() { let mut s = String::from("hello"); let r1 = &s; let r2 = &mut s; }',
                "solution": "End the immutable borrow before taking the mutable one.",
            },
            {
                "code": "E0507",
                "title": "Cannot move out of borrowed content",
                "description": "A value is moved out of something that is only borrowed.",
                "example": 'fn main() { let s = &String::from("hello"); let s2 = *s; }',
                "solution": "Clone to get an owned copy or keep working through the reference.",
            },
            {
                "code": "E0596",
                "title": "Cannot borrow as mutable",
                "description": "A binding that was not declared mutable is borrowed mutably.",
                "example": 'fn main() { let s = String::from("hello"); s.push_str(" world"); }',
                "solution": "Declare the binding with `let mut`.",
            },
        ]
    },
)

BEST_PRACTICES = ResourceDescriptor(
    name="Rust Best Practices",
    description="Guide to idiomatic Rust coding practices and patterns",
    uri="rust://guide/best-practices",
    kind="guide",
    data={
        "categories": [
            {
                "name": "Error Handling",
                "practices": [
                    {
                        "title": "Use Result for fallible functions",
                        "description": "Return Result<T, E> instead of panicking or calling unwrap().",
                        "example": (
                            "fn divide(a: i32, b: i32) -> Result<i32, String> {\n"
                            "  if b == 0 {\n"
                            '    return Err("Division by zero".to_string());\n'
                            "  }\n"
                            "  Ok(a / b)\n"
                            "}"
                        ),
                    },
                    {
                        "title": "Use the ? operator for error propagation",
                        "description": "? returns early with the error and keeps the happy path flat.",
                        "example": (
                            "fn read(path: &str) -> Result<String, io::Error> {\n"
                            "  let contents = fs::read_to_string(path)?;\n"
                            "  Ok(contents)\n"
                            "}"
                        ),
                    },
                ],
            },
            {
                "name": "Performance",
                "practices": [
                    {
                        "title": "Prefer iterators over index loops",
                        "description": "Iterator chains are clearer and optimize at least as well.",
                        "example": "let sum: i32 = nums.iter().sum();",
                    },
                    {
                        "title": "Pick data structures by access pattern",
                        "description": "HashMap for lookups, BTreeMap when ordering matters.",
                        "example": "let mut scores = HashMap::new();\nlet mut sorted = BTreeMap::new();",
                    },
                ],
            },
            {
                "name": "Safety",
                "practices": [
                    {
                        "title": "Minimize unsafe",
                        "description": "Keep unsafe blocks small and wrap them in safe abstractions.",
                        "example": (
                            "fn get_value<T: Copy>(ptr: *const T) -> Option<T> {\n"
                            "  if ptr.is_null() {\n"
                            "    return None;\n"
                            "  }\n"
                            "  Some(unsafe { *ptr })\n"
                            "}"
                        ),
                    },
                    {
                        "title": "Use newtypes to prevent mix-ups",
                        "description": "Wrap primitives in dedicated types so they cannot be swapped.",
                        "example": "struct UserId(u64);\nstruct GroupId(u64);",
                    },
                ],
            },
        ]
    },
)

LIFETIME_REFERENCE = ResourceDescriptor(
    name="Rust Lifetime Reference",
    description="Guide to understanding Rust's lifetime system",
    uri="rust://reference/lifetimes",
    kind="reference",
    data={
        "sections": [
            {
                "title": "What are lifetimes?",
                "content": (
                    "Lifetimes let the compiler check that references stay valid for as long as "
                    "they are used. They describe how the validity of references relates."
                ),
            },
            {
                "title": "Lifetime syntax",
                "content": "A lifetime is an apostrophe followed by a name, such as 'a.",
                "examples": [
                    "fn longest<'a>(x: &'a str, y: &'a str) -> &'a str",
                    "struct Reference<'a> { value: &'a str }",
                ],
            },
            {
                "title": "Lifetime elision",
                "content": "In common cases the compiler infers lifetimes through the elision rules.",
                "examples": [
                    "fn first_word(s: &str) -> &str",
                ],
            },
            {
                "title": "Common patterns",
                "content": "Patterns that come up repeatedly:",
                "patterns": [
                    "'static for values that live for the whole program",
                    "Input lifetimes on parameters",
                    "Output lifetimes on return values",
                    "Several lifetime parameters when references live for different spans",
                ],
            },
        ]
    },
)

DEFAULT_RESOURCES = (COMMON_ERRORS, BEST_PRACTICES, LIFETIME_REFERENCE)
