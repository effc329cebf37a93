from boxpublish.main import main

raise SystemExit(main())
