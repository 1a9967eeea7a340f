"""Built-in posts seeded the first time no collection is stored."""

from __future__ import annotations

from journal_sync.models.post import CodeBlock, Post, TextBlock


def default_posts() -> list[Post]:
    """Return a fresh copy of the built-in collection."""
    return [
        Post(
            slug="getting-started-with-nextjs",
            title="Getting Started with Next.js",
            date="2023-05-10",
            excerpt=(
                "Today I learned how to set up a Next.js project and explored "
                "its file-based routing system."
            ),
            tags=["Next.js", "React", "Web Development"],
            content=[
                TextBlock(
                    content=(
                        "Today I started learning Next.js and I'm really impressed with how "
                        "easy it is to get started. The file-based routing system is "
                        "intuitive and powerful."
                    )
                ),
                TextBlock(content="To create a new Next.js project, you can use the following command:"),
                CodeBlock(language="bash", content="npx create-next-app@latest my-next-app"),
                TextBlock(
                    content=(
                        "The file structure is very intuitive. For example, to create a new "
                        "page, you just need to add a new file to the pages directory:"
                    )
                ),
                CodeBlock(
                    language="jsx",
                    content=(
                        "// pages/about.js\n"
                        "export default function About() {\n"
                        "  return (\n"
                        "    <div>\n"
                        "      <h1>About Page</h1>\n"
                        "      <p>This is the about page</p>\n"
                        "    </div>\n"
                        "  )\n"
                        "}"
                    ),
                ),
                TextBlock(
                    content=(
                        "I'm excited to learn more about Next.js and build more complex "
                        "applications with it!"
                    )
                ),
            ],
        ),
    ]
