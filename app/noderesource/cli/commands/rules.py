"""Rules commands.

Provides commands to validate the rule documents and to show which
rules apply to this node.
"""

from typing import Annotated

import typer

from noderesource.cli.types import (
    ConfigDirOption,
    KubeconfigOption,
    LabelOption,
    MasterOption,
    NodeIdOption,
    build_settings,
    resolve_node_labels,
)
from noderesource.core.agent import get_node_source
from noderesource.core.paths import get_rules_path
from noderesource.core.rules import RulesError, load_rules
from noderesource.core.selector import selector_matches
from noderesource.models.result import ResourceKind
from noderesource.utils.formatting import (
    console,
    create_rules_table,
    print_error,
    print_info,
    print_success,
)

app = typer.Typer(
    help="Validate and show rules.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(
    kind: Annotated[
        ResourceKind,
        typer.Argument(help="Resource kind: volumegroup, quotapath or memory."),
    ],
    node_id: NodeIdOption = "",
    config_dir: ConfigDirOption = None,
    kubeconfig: KubeconfigOption = None,
    master: MasterOption = None,
    labels: LabelOption = None,
) -> None:
    """Show the rules of one kind and whether they match this node.

    Exits with code 1 if the document cannot be loaded.

    Examples:
        noderesource rules show quotapath -l bar=foo
        noderesource rules show volumegroup --node-id node-1
    """
    settings = build_settings(
        node_id=node_id,
        config_dir=config_dir,
        dry_run=True,
        host_namespace=False,
        kubeconfig=kubeconfig,
        master=master,
        labels=labels,
        local_disk_count=0,
    )
    path = get_rules_path(kind.value, settings.config_dir)

    try:
        rules = load_rules(path, kind.value)
    except RulesError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not rules:
        print_info(f"No {kind.value} rules in {path}")
        return

    node_labels = resolve_node_labels(get_node_source(settings))
    matched = [selector_matches(rule.selector, node_labels) for rule in rules]

    console.print(create_rules_table(rules, matched, title=f"{kind.value} rules ({path})"))
    print_info(f"{sum(matched)} of {len(rules)} rule(s) match this node.")


@app.command()
def check(config_dir: ConfigDirOption = None) -> None:
    """Validate the rule documents of every kind.

    Missing documents count as empty. Exits with code 1 if any document
    is invalid.
    """
    failed = False
    for kind in ResourceKind:
        path = get_rules_path(kind.value, config_dir)
        try:
            rules = load_rules(path, kind.value)
        except RulesError as e:
            print_error(str(e))
            failed = True
            continue
        print_info(f"{kind.value}: {len(rules)} rule(s) in {path}")

    if failed:
        raise typer.Exit(code=1)
    print_success("All rule documents are valid.")
