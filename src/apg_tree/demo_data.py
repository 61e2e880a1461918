"""Sample trees for --demo mode and ``apg-tree init``."""

from __future__ import annotations

from apg_tree.models import TreeNode


def get_demo_nodes() -> list[TreeNode]:
    """A small file-browser tree with a disabled branch."""
    return [
        TreeNode("docs", "Documents", children=(
            TreeNode("report", "report.pdf"),
            TreeNode("notes", "notes.txt"),
            TreeNode("drafts", "Drafts", children=(
                TreeNode("draft1", "draft-1.md"),
                TreeNode("draft2", "draft-2.md"),
            )),
        )),
        TreeNode("images", "Images", children=(
            TreeNode("photo1", "photo1.jpg"),
            TreeNode("photo2", "photo2.jpg"),
        )),
        TreeNode("archive", "Archive (locked)", disabled=True, children=(
            TreeNode("old", "old-backup.zip"),
        )),
        TreeNode("readme", "readme.md"),
    ]


def build_sample_tree(name: str = "Project") -> list[TreeNode]:
    """Template tree written by ``apg-tree init``."""
    return [
        TreeNode("root", name, children=(
            TreeNode("design", "Design", children=(
                TreeNode("requirements", "Requirements"),
                TreeNode("review", "Technical Review"),
            )),
            TreeNode("build", "Implementation", children=(
                TreeNode("core", "Core Development"),
                TreeNode("testing", "Testing"),
            )),
        )),
    ]
