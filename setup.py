from setuptools import setup

setup(
    name="jsonpull",
    version="0.1.0",
    description=(
        "Provides an asyncio pull tokenizer for JSON arriving in chunks, with token by token walking, "
        "eager decoding of any value mid-stream and an ObjectStreamer that yields the elements or "
        "key-value pairs of the `root` json array/object. Memory use follows nesting depth, not size."
    ),
    packages=["jsonpull"],
    python_requires=">=3.8",
    install_requires=[],
)
