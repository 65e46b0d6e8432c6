# kontext

kontext is a command-line tool that manages Kubernetes contexts in your kubectl
configuration. It can add, list, merge, delete and clean contexts. Before
`delete` or `clean` changes the file, the tool writes a timestamped backup next
to it. It keeps the five most recent backups, which are named
`<kubeconfig>.backup-YYYYMMDD-HHMMSS`.

## Installation

```
pip install .
```

## Which file is used

The tool works on the default kubeconfig file. If `KUBECONFIG` is set, this is
the first path in that list that exists, or the first path in the list if none
of them exists. If `KUBECONFIG` is not set, it is `~/.kube/config`. If the file
does not exist, the tool starts from an empty configuration.

## Usage

### Add a context

```
kontext add --name dev --server https://10.0.0.1:6443 --token token
```

`--name`, `--server` and `--token` are required. A name may be up to 255
characters long. Before it adds anything, the tool checks that it can reach the
cluster by listing its namespaces with the token. It then creates a cluster, a
user and a context, all with the given name, and makes that context the current
one. If a cluster, user or context with that name already exists, the tool
reports the entry as failed and does not add it.

If you pass `--scan alauda`, the tool also lists the
`clusters.platform.tkestack.io` resources on the server. For each cluster
except `global`, it adds a context named `<name>-<cluster>`. The server URL of
that context is the given URL with its last path segment replaced by the
cluster name.

### List contexts

```
kontext list
```

This command shows every context together with its cluster (and that cluster's
server) and its user. It marks references that are missing. It also reports
clusters and users that no context refers to.

### Merge a kubeconfig file

```
kontext merge --path ./other-config.yaml --name prod
```

This command imports the token-based contexts from another kubeconfig file. It
skips contexts whose cluster or user is missing, and contexts that use client
certificates. Each imported context is named `<prefix>-<context>`. The prefix
is the value of `--name`, or the file name without its extension if you leave
`--name` out. If any imported name clashes with an existing context, the
command stops and changes nothing. The `--scan alauda` option works here too.

### Delete contexts

```
kontext delete --name dev
kontext delete --name "staging*"
```

This command removes one context. If the name contains a `*`, it removes every
context whose name starts with the rest of the name (the text left once the `*`
is taken out). If it removes the current context, it clears the current context
setting. It then removes any clusters and users that are left orphaned.

### Clean the configuration

```
kontext clean
```

This command removes contexts whose cluster or user is missing, and contexts
whose cluster it cannot reach with the stored token. If the current context is
among them, or points to a context that does not exist, the command clears the
current context setting. It then removes any orphaned clusters and users.

## Use from Python

The commands are also available as functions: `kontext.add.add_context`,
`kontext.merge.merge_context`, `kontext.listing.list_contexts`,
`kontext.prune.delete_context` and `kontext.prune.clean_contexts`. Errors are
raised as `kontext.kubeconfig.KubeConfigError`, or as its subclass
`kontext.cluster.ClusterAccessError` for problems that come from reaching a
cluster. `kontext.kubeconfig` reads and writes kubeconfig files as `KubeConfig`
objects (`load_config`, `dump_config`, `write_config`, `safe_write_config`).

## Limitations

- Connections to API servers do not verify TLS certificates, and clusters
  added by the tool are written with `insecure-skip-tls-verify: true`. There is
  no option to change this.
- Only bearer-token authentication is supported. `merge` skips
  certificate-based users.
- `alauda` is the only sub-cluster scan type.

## Development

```
pip install -e ".[test]"
pytest
```