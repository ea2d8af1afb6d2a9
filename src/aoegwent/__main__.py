from aoegwent.cli import main

raise SystemExit(main())
