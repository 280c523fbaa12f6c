"""Convert `go test -v` output into TeamCity service messages."""
